from __future__ import annotations

from typing import TYPE_CHECKING

from hybrid.Foundation.AliasLoader import AliasLoader
from hybrid.Foundation.PackageManifest import PackageManifest
from hybrid.Support.Facades.Facade import Facade

if TYPE_CHECKING:
    from hybrid.Foundation.Application import Application


class RegisterFacades:

    def bootstrap(self, app: Application) -> None:
        Facade.clear_resolved_instances()
        Facade.set_facade_application(app)

        aliases = dict(app.make('config').get('app.aliases') or Facade.default_aliases())
        aliases.update(app.make(PackageManifest).aliases())

        AliasLoader.get_instance(aliases).register()
