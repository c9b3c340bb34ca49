from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional

if TYPE_CHECKING:
    from hybrid.Container.Container import Abstract, Container


class ContextualBindingBuilder:
    """
    Fluent builder behind `Container.when()`.

        container.when(ReportMailer).needs(Transport).give(SesTransport)
        container.when(ReportMailer).needs('$sender').give_config('mail.from')

    `needs` takes a class or `'$<parameter name>'` for primitive parameters.
    """

    def __init__(self, container: Container, concrete: List[Abstract]) -> None:
        self.container = container
        self.concrete = concrete
        self.need: Optional[Abstract] = None

    def needs(self, abstract: Abstract) -> ContextualBindingBuilder:
        """Define the abstract target that depends on the context."""
        self.need = abstract
        return self

    def give(self, implementation: Any) -> None:
        """Define the implementation for the contextual binding."""
        if self.need is None:
            raise ValueError("Call needs() before give().")

        for concrete in self.concrete:
            self.container.add_contextual_binding(concrete, self.need, implementation)

    def give_tagged(self, tag: str) -> None:
        """Give every service registered under a tag."""
        self.give(lambda container: container.tagged(tag))

    def give_config(self, key: str, default: Any = None) -> None:
        """Give a configuration value."""
        self.give(lambda container: container.make('config').get(key, default))
