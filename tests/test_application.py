from __future__ import annotations

import os
from pathlib import Path
from typing import Any, List

import pytest

from hybrid.Config.Repository import Repository
from hybrid.Container.Container import Container
from hybrid.Contracts.DeferrableProvider import DeferrableProvider
from hybrid.Events.Dispatcher import Dispatcher
from hybrid.Foundation.Application import Application, app as app_helper
from hybrid.Foundation.Exceptions import NamespaceDetectionException, ProviderResolutionException
from hybrid.Foundation.ServiceProvider import ServiceProvider, provider_key


class Mailer:
    pass


class Recorder:
    """Collects lifecycle events shared by the providers below."""
    events: List[str] = []


class MailServiceProvider(ServiceProvider):

    def register(self) -> None:
        Recorder.events.append('mail.register')
        self.app.singleton('mailer', lambda app: Mailer())

    def boot(self) -> None:
        Recorder.events.append('mail.boot')


class QueueServiceProvider(ServiceProvider):

    def register(self) -> None:
        Recorder.events.append('queue.register')

    def boot(self, mailer: Mailer) -> None:
        Recorder.events.append(f'queue.boot:{type(mailer).__name__}')


class ExpensiveServiceProvider(ServiceProvider, DeferrableProvider):
    instances = 0

    def __init__(self, app: Application) -> None:
        super().__init__(app)
        ExpensiveServiceProvider.instances += 1

    def register(self) -> None:
        Recorder.events.append('expensive.register')
        self.app.singleton('expensive', lambda app: object())
        self.app.singleton('expensive.helper', lambda app: 'helper')

    def boot(self) -> None:
        Recorder.events.append('expensive.boot')

    def provides(self) -> List[Any]:
        return ['expensive', 'expensive.helper']


class DeclarativeServiceProvider(ServiceProvider):

    def bindings(self) -> dict:
        return {'transient': lambda app: object()}

    def singletons(self) -> dict:
        return {'shared': lambda app: object()}


class BrokenServiceProvider(ServiceProvider):

    def register(self) -> None:
        raise RuntimeError('cannot register')


class Integrations:

    class SlackServiceProvider(ServiceProvider):
        pass


@pytest.fixture(autouse=True)
def reset_recorder() -> None:
    Recorder.events = []
    ExpensiveServiceProvider.instances = 0


class TestBaseBindings:
    """A new application binds itself and its paths."""

    def test_binds_itself_under_core_aliases(self, app: Application) -> None:
        assert app.make('app') is app
        assert app.make(Application) is app
        assert app.make(Container) is app
        assert Container.get_instance() is app
        assert app_helper() is app

    def test_registers_event_dispatcher(self, app: Application) -> None:
        assert isinstance(app.make('events'), Dispatcher)
        assert app.make(Dispatcher) is app.make('events')

    def test_paths_are_bound(self, app: Application, base_path: Path) -> None:
        assert app.make('path.base') == str(base_path)
        assert app.make('path.config') == os.path.join(str(base_path), 'config')
        assert app.storage_path('logs') == os.path.join(str(base_path), 'storage', 'logs')
        assert app.path() == os.path.join(str(base_path), 'app')

    def test_path_overrides_are_rebound(self, app: Application, tmp_path: Path) -> None:
        storage = str(tmp_path / 'var')

        app.use_storage_path(storage)

        assert app.storage_path() == storage
        assert app.storage_path('logs') == os.path.join(storage, 'logs')
        assert app.make('path.storage') == storage

    def test_version(self, app: Application) -> None:
        assert app.version() == Application.VERSION


class TestProviderRegistration:
    """`register` is idempotent per provider class."""

    def test_register_returns_existing_instance(self, app: Application) -> None:
        first = app.register(MailServiceProvider)
        second = app.register(MailServiceProvider)

        assert first is second
        assert Recorder.events == ['mail.register']
        assert app.get_provider(MailServiceProvider) is first
        assert app.provider_is_loaded(MailServiceProvider)

    def test_register_accepts_dotted_names(self, app: Application) -> None:
        name = f'{MailServiceProvider.__module__}.{MailServiceProvider.__qualname__}'

        provider = app.register(name)

        assert isinstance(provider, MailServiceProvider)
        assert app.get_provider(MailServiceProvider) is provider

    def test_dotted_name_of_nested_provider_matches_class(self, app: Application) -> None:
        name = f'{Integrations.__module__}.Integrations.SlackServiceProvider'

        by_name = app.register(name)
        by_class = app.register(Integrations.SlackServiceProvider)

        assert by_name is by_class
        assert provider_key(name) == provider_key(Integrations.SlackServiceProvider)
        assert provider_key(name).endswith(':Integrations.SlackServiceProvider')
        assert len(app.get_providers(Integrations.SlackServiceProvider)) == 1

    def test_unknown_provider_name_raises(self, app: Application) -> None:
        with pytest.raises(ProviderResolutionException):
            app.register('hybrid.Providers.Missing:MissingServiceProvider')

    def test_non_provider_class_raises(self, app: Application) -> None:
        with pytest.raises(ProviderResolutionException):
            app.register(Mailer)

    def test_forced_registration_replaces_in_place(self, app: Application) -> None:
        app.register(MailServiceProvider)
        app.register(QueueServiceProvider)
        original = app.get_provider(MailServiceProvider)

        replacement = app.register(MailServiceProvider, force=True)

        assert replacement is not original
        assert app.get_provider(MailServiceProvider) is replacement

        names = [type(p).__name__ for p in app.get_providers(ServiceProvider)]
        assert names.index('MailServiceProvider') < names.index('QueueServiceProvider')
        assert original not in app.get_providers(MailServiceProvider)

    def test_declarative_bindings(self, app: Application) -> None:
        app.register(DeclarativeServiceProvider)

        assert app.make('transient') is not app.make('transient')
        assert app.make('shared') is app.make('shared')

    def test_failed_registration_is_not_recorded(self, app: Application) -> None:
        with pytest.raises(RuntimeError, match='cannot register'):
            app.register(BrokenServiceProvider)

        assert not app.provider_is_loaded(BrokenServiceProvider)


class TestBooting:
    """Providers boot once, after registration."""

    def test_boot_runs_each_provider_once(self, app: Application) -> None:
        app.register(MailServiceProvider)
        app.register(QueueServiceProvider)

        app.boot()
        app.boot()

        assert Recorder.events == [
            'mail.register',
            'queue.register',
            'mail.boot',
            'queue.boot:Mailer',
        ]
        assert app.is_booted()

    def test_late_registration_boots_immediately(self, app: Application) -> None:
        app.boot()

        app.register(MailServiceProvider)

        assert Recorder.events == ['mail.register', 'mail.boot']

    def test_boot_callbacks_order(self, app: Application) -> None:
        order: List[str] = []
        app.register(MailServiceProvider)
        app.booting(lambda application: order.append('booting'))
        app.booted(lambda application: order.append('booted'))

        app.boot()

        assert order == ['booting', 'booted']
        assert Recorder.events[-1] == 'mail.boot'

    def test_booted_callback_after_boot_fires_immediately(self, app: Application) -> None:
        app.boot()
        seen: List[Application] = []

        app.booted(seen.append)

        assert seen == [app]

    def test_booting_callbacks_added_while_draining_run_before_providers(self, app: Application) -> None:
        order: List[str] = []
        app.register(MailServiceProvider)

        def first(application: Application) -> None:
            order.append('first')
            application.booting(lambda a: order.append('second'))

        app.booting(first)
        app.boot()

        assert order == ['first', 'second']
        assert Recorder.events == ['mail.register', 'mail.boot']

    def test_provider_level_callbacks_wrap_boot(self, app: Application) -> None:
        provider = app.register(MailServiceProvider)
        provider.booting(lambda: Recorder.events.append('mail.booting'))
        provider.booted(lambda: Recorder.events.append('mail.booted'))

        app.boot()

        assert Recorder.events == ['mail.register', 'mail.booting', 'mail.boot', 'mail.booted']

    def test_provider_registered_during_boot_is_booted(self, app: Application) -> None:
        class ParentServiceProvider(ServiceProvider):
            def boot(self) -> None:
                self.app.register(QueueServiceProvider)

        app.register(MailServiceProvider)
        app.register(ParentServiceProvider)

        app.boot()

        assert 'queue.boot:Mailer' in Recorder.events
        assert Recorder.events.count('queue.boot:Mailer') == 1


class TestDeferredProviders:
    """Deferred providers load on first resolution."""

    def defer(self, app: Application) -> None:
        app.add_deferred_services({
            'expensive': ExpensiveServiceProvider,
            'expensive.helper': ExpensiveServiceProvider,
        })

    def test_not_registered_until_requested(self, app: Application) -> None:
        self.defer(app)

        assert ExpensiveServiceProvider.instances == 0
        assert app.bound('expensive')
        assert not app.provider_is_loaded(ExpensiveServiceProvider)

    def test_first_resolution_registers_and_clears_all_services(self, app: Application) -> None:
        self.defer(app)

        app.make('expensive')

        assert app.provider_is_loaded(ExpensiveServiceProvider)
        assert not app.is_deferred_service('expensive')
        assert not app.is_deferred_service('expensive.helper')
        assert app.make('expensive.helper') == 'helper'
        assert ExpensiveServiceProvider.instances == 1

    def test_loading_after_boot_boots_the_provider(self, app: Application) -> None:
        self.defer(app)
        app.boot()

        app.make('expensive')

        assert Recorder.events == ['expensive.register', 'expensive.boot']

    def test_loading_before_boot_defers_boot(self, app: Application) -> None:
        self.defer(app)

        app.make('expensive')
        assert Recorder.events == ['expensive.register']

        app.boot()
        assert Recorder.events == ['expensive.register', 'expensive.boot']

    def test_load_deferred_providers(self, app: Application) -> None:
        self.defer(app)

        app.load_deferred_providers()

        assert app.get_deferred_services() == {}
        assert app.provider_is_loaded(ExpensiveServiceProvider)
        assert ExpensiveServiceProvider.instances == 1

    def test_deferred_services_can_be_replaced(self, app: Application) -> None:
        self.defer(app)

        app.set_deferred_services({'expensive': ExpensiveServiceProvider})

        assert not app.is_deferred_service('expensive.helper')


class TestEnvironment:
    """Environment detection and checks."""

    def test_defaults_to_production(self, app: Application) -> None:
        assert app.environment() == 'production'
        assert app.is_production()

    def test_detect_environment_uses_callback(self, app: Application) -> None:
        app.detect_environment(lambda: 'local')

        assert app.environment() == 'local'
        assert app.is_local()
        assert app.environment('staging', 'local')
        assert app.environment(['loc*'])
        assert not app.environment('production')

    def test_console_env_option_wins(self, app: Application, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv('APP_RUNNING_IN_CONSOLE', 'true')
        monkeypatch.setattr('sys.argv', ['hybrid', 'serve', '--env=staging'])

        app.detect_environment(lambda: 'local')

        assert app.running_in_console()
        assert app.environment() == 'staging'

    def test_running_unit_tests(self, app: Application) -> None:
        app.detect_environment(lambda: 'testing')

        assert app.running_unit_tests()

    def test_environment_file_path(self, app: Application, base_path: Path) -> None:
        app.load_environment_from('.env.testing')

        assert app.environment_file() == '.env.testing'
        assert app.environment_file_path() == os.path.join(str(base_path), '.env.testing')


class TestCachePaths:
    """Cache locations and their overrides."""

    def test_defaults_live_in_bootstrap_cache(self, app: Application, base_path: Path) -> None:
        cache = os.path.join(str(base_path), 'bootstrap', 'cache')

        assert app.get_cached_services_path() == os.path.join(cache, 'services.json')
        assert app.get_cached_packages_path() == os.path.join(cache, 'packages.json')
        assert app.get_cached_config_path() == os.path.join(cache, 'config.json')
        assert not app.configuration_is_cached()

    def test_relative_override_resolves_against_base_path(
        self, app: Application, base_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv('APP_SERVICES_CACHE', 'var/services.json')

        assert app.get_cached_services_path() == os.path.join(str(base_path), 'var/services.json')

    def test_absolute_override_is_kept(
        self, app: Application, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        target = str(tmp_path / 'elsewhere' / 'config.json')
        monkeypatch.setenv('APP_CONFIG_CACHE', target)

        assert app.get_cached_config_path() == target


class TestTermination:
    """Terminating callbacks and flushing."""

    def test_terminate_drains_callbacks_in_order(self, app: Application) -> None:
        order: List[str] = []

        def first() -> None:
            order.append('first')
            app.terminating(lambda: order.append('third'))

        app.terminating(first).terminating(lambda: order.append('second'))

        app.terminate()

        assert order == ['first', 'second', 'third']

    def test_terminating_callbacks_receive_injection(self, app: Application) -> None:
        seen: List[Any] = []

        def typed(dispatcher: Dispatcher) -> None:
            seen.append(dispatcher)

        app.terminating(typed)
        app.terminate()

        assert seen == [app.make('events')]

    def test_flush_resets_lifecycle(self, app: Application) -> None:
        app.register(MailServiceProvider)
        app.boot()

        app.flush()

        assert not app.is_booted()
        assert not app.has_been_bootstrapped()
        assert app.get_loaded_providers() == {}
        assert not app.bound('mailer')


class TestNamespace:
    """Application package detection from `pyproject.toml`."""

    def test_detects_setuptools_package(self, app: Application, base_path: Path) -> None:
        (base_path / 'app').mkdir()
        (base_path / 'pyproject.toml').write_text(
            '[tool.setuptools]\npackages = ["hybrid", "app"]\n', encoding='utf-8'
        )

        assert app.get_namespace() == 'app'

    def test_detects_find_include(self, app: Application, base_path: Path) -> None:
        (base_path / 'src' / 'acme').mkdir(parents=True)
        (base_path / 'pyproject.toml').write_text(
            '[tool.setuptools.packages.find]\ninclude = ["src.acme*"]\n', encoding='utf-8'
        )
        app.use_app_path(str(base_path / 'src' / 'acme'))

        assert app.get_namespace() == 'src.acme'

    def test_missing_pyproject_raises(self, app: Application) -> None:
        with pytest.raises(NamespaceDetectionException):
            app.get_namespace()

    def test_undeclared_package_raises(self, app: Application, base_path: Path) -> None:
        (base_path / 'pyproject.toml').write_text('[project]\nname = "demo"\n', encoding='utf-8')

        with pytest.raises(NamespaceDetectionException):
            app.get_namespace()


class TestConfigHelper:

    def test_app_helper_resolves_entries(self, app: Application) -> None:
        app.instance('config', Repository({'app': {'name': 'Hybrid'}}))

        assert app_helper('config').get('app.name') == 'Hybrid'
