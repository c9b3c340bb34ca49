from __future__ import annotations

import fnmatch
import inspect
import os
import sys
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Type, Union

from hybrid.Config.Repository import Repository
from hybrid.Container.Container import Abstract, Container
from hybrid.Events.Dispatcher import Dispatcher
from hybrid.Filesystem.Filesystem import Filesystem
from hybrid.Foundation.Exceptions import NamespaceDetectionException, ProviderResolutionException
from hybrid.Foundation.PackageManifest import PackageManifest
from hybrid.Foundation.ProviderRepository import ProviderRepository
from hybrid.Foundation.ServiceProvider import (
    ProviderReference,
    ServiceProvider,
    provider_key,
    resolve_provider_class,
)
from hybrid.Log.LogManager import LogManager
from hybrid.Support.Arr import Arr
from hybrid.Support.Env import Env

if TYPE_CHECKING:
    from hybrid.Foundation.Configuration.ApplicationBuilder import ApplicationBuilder

AppCallback = Callable[['Application'], Any]


class Application(Container):
    """
    The Hybrid application: a container that owns service providers and the
    bootstrap lifecycle.

    Providers register bindings first and boot once every provider has been
    registered. Deferred providers are only registered when one of the
    services they provide is resolved.
    """

    VERSION = '7.0.0'

    def __init__(self, base_path: Optional[str] = None) -> None:
        super().__init__()

        self._base_path: str = ''
        self._app_path: Optional[str] = None
        self._bootstrap_path: Optional[str] = None
        self._config_path: Optional[str] = None
        self._database_path: Optional[str] = None
        self._lang_path: Optional[str] = None
        self._public_path: Optional[str] = None
        self._storage_path: Optional[str] = None
        self._environment_path: Optional[str] = None
        self._environment_file: str = '.env'

        self._has_been_bootstrapped: bool = False
        self._booted: bool = False
        self._booting_callbacks: List[AppCallback] = []
        self._booted_callbacks: List[AppCallback] = []
        self._registered_callbacks: List[AppCallback] = []
        self._terminating_callbacks: List[Callable[..., Any]] = []

        # Insertion order is boot order.
        self._service_providers: Dict[str, ServiceProvider] = {}
        self._loaded_providers: Dict[str, bool] = {}
        self._deferred_services: Dict[Any, ProviderReference] = {}

        self._is_running_in_console: Optional[bool] = None
        self._namespace: Optional[str] = None

        self.set_base_path(base_path or str(Path.cwd()))

        self._register_base_bindings()
        self._register_base_service_providers()
        self._register_core_container_aliases()

    @classmethod
    def configure(cls, base_path: Optional[str] = None) -> ApplicationBuilder:
        """Begin configuring a new application instance."""
        from hybrid.Foundation.Configuration.ApplicationBuilder import ApplicationBuilder

        return ApplicationBuilder(cls(base_path))

    def version(self) -> str:
        """Get the version number of the application."""
        return self.VERSION

    def _register_base_bindings(self) -> None:
        Container.set_instance(self)

        self.instance('app', self)
        self.instance(
            PackageManifest,
            PackageManifest(Filesystem(), self.base_path(), self.get_cached_packages_path()),
        )

    def _register_base_service_providers(self) -> None:
        from hybrid.Providers.EventServiceProvider import EventServiceProvider

        self.register(EventServiceProvider(self))

    def _register_core_container_aliases(self) -> None:
        aliases: Dict[str, List[type]] = {
            'app': [Application, Container],
            'config': [Repository],
            'events': [Dispatcher],
            'files': [Filesystem],
            'log': [LogManager],
        }

        if type(self) is not Application:
            aliases['app'].append(type(self))

        for key, classes in aliases.items():
            for alias in classes:
                self.alias(key, alias)

    # ------------------------------------------------------------------
    # Bootstrapping
    # ------------------------------------------------------------------

    def bootstrap_with(self, bootstrappers: List[Abstract]) -> None:
        """Run the given array of bootstrap classes."""
        self._has_been_bootstrapped = True

        for bootstrapper in bootstrappers:
            name = self._bootstrapper_name(bootstrapper)
            step = self.make(bootstrapper)

            self.make('events').dispatch(f'bootstrapping:{name}', [self])
            self.logger.debug(f"Bootstrapping {name}")

            step.bootstrap(self)

            self.make('events').dispatch(f'bootstrapped:{name}', [self])

    def bootstrap(self, bootstrappers: Optional[List[Abstract]] = None) -> None:
        """Run the bootstrap pipeline once."""
        if self.has_been_bootstrapped():
            return

        self.bootstrap_with(bootstrappers if bootstrappers is not None else self.bootstrappers())

    def bootstrappers(self) -> List[Abstract]:
        """Get the default bootstrap steps, in order."""
        from hybrid.Foundation.Bootstrap import (
            BootProviders,
            GenerateStorageStructures,
            LoadConfiguration,
            LoadEnvironmentVariables,
            RegisterFacades,
            RegisterProviders,
        )

        return [
            LoadEnvironmentVariables,
            LoadConfiguration,
            GenerateStorageStructures,
            RegisterFacades,
            RegisterProviders,
            BootProviders,
        ]

    def before_bootstrapping(self, bootstrapper: Abstract, callback: AppCallback) -> None:
        """Register a callback to run before a bootstrapper."""
        name = self._bootstrapper_name(bootstrapper)
        self.make('events').listen(f'bootstrapping:{name}', lambda event, app: callback(app))

    def after_bootstrapping(self, bootstrapper: Abstract, callback: AppCallback) -> None:
        """Register a callback to run after a bootstrapper."""
        name = self._bootstrapper_name(bootstrapper)
        self.make('events').listen(f'bootstrapped:{name}', lambda event, app: callback(app))

    def has_been_bootstrapped(self) -> bool:
        return self._has_been_bootstrapped

    def _bootstrapper_name(self, bootstrapper: Abstract) -> str:
        return bootstrapper.__name__ if inspect.isclass(bootstrapper) else str(bootstrapper)

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def set_base_path(self, base_path: str) -> Application:
        """Set the base path for the application."""
        self._base_path = str(base_path).rstrip('\\/') or os.sep
        self._bind_paths_in_container()
        return self

    def _bind_paths_in_container(self) -> None:
        self.instance('path', self.path())
        self.instance('path.base', self.base_path())
        self.instance('path.config', self.config_path())
        self.instance('path.database', self.database_path())
        self.instance('path.public', self.public_path())
        self.instance('path.resources', self.resource_path())
        self.instance('path.storage', self.storage_path())
        self.instance('path.bootstrap', self.bootstrap_path())
        self.instance('path.lang', self.lang_path())

    def path(self, path: str = '') -> str:
        """Get the path to the application package."""
        return self.join_paths(self._app_path or os.path.join(self._base_path, 'app'), path)

    def use_app_path(self, path: str) -> Application:
        self._app_path = path
        self.instance('path', path)
        return self

    def base_path(self, path: str = '') -> str:
        """Get the base path of the installation."""
        return self.join_paths(self._base_path, path)

    def bootstrap_path(self, path: str = '') -> str:
        """Get the path to the bootstrap directory."""
        return self.join_paths(self._bootstrap_path or os.path.join(self._base_path, 'bootstrap'), path)

    def use_bootstrap_path(self, path: str) -> Application:
        self._bootstrap_path = path
        self.instance('path.bootstrap', path)
        return self

    def config_path(self, path: str = '') -> str:
        """Get the path to the configuration files."""
        return self.join_paths(self._config_path or os.path.join(self._base_path, 'config'), path)

    def use_config_path(self, path: str) -> Application:
        self._config_path = path
        self.instance('path.config', path)
        return self

    def database_path(self, path: str = '') -> str:
        """Get the path to the database directory."""
        return self.join_paths(self._database_path or os.path.join(self._base_path, 'database'), path)

    def use_database_path(self, path: str) -> Application:
        self._database_path = path
        self.instance('path.database', path)
        return self

    def lang_path(self, path: str = '') -> str:
        """Get the path to the language files."""
        return self.join_paths(self._lang_path or os.path.join(self._base_path, 'lang'), path)

    def use_lang_path(self, path: str) -> Application:
        self._lang_path = path
        self.instance('path.lang', path)
        return self

    def public_path(self, path: str = '') -> str:
        """Get the path to the public directory."""
        return self.join_paths(self._public_path or os.path.join(self._base_path, 'public'), path)

    def use_public_path(self, path: str) -> Application:
        self._public_path = path
        self.instance('path.public', path)
        return self

    def storage_path(self, path: str = '') -> str:
        """Get the path to the storage directory."""
        return self.join_paths(self._storage_path or os.path.join(self._base_path, 'storage'), path)

    def use_storage_path(self, path: str) -> Application:
        self._storage_path = path
        self.instance('path.storage', path)
        return self

    def resource_path(self, path: str = '') -> str:
        """Get the path to the resources directory."""
        return self.join_paths(os.path.join(self._base_path, 'resources'), path)

    def environment_path(self) -> str:
        """Get the directory holding the environment file."""
        return self._environment_path or self._base_path

    def use_environment_path(self, path: str) -> Application:
        self._environment_path = path
        return self

    @staticmethod
    def join_paths(base_path: str, path: str = '') -> str:
        """Join the given paths together."""
        return os.path.join(base_path, path.lstrip('\\/')) if path else base_path

    # ------------------------------------------------------------------
    # Environment
    # ------------------------------------------------------------------

    def load_environment_from(self, file: str) -> Application:
        """Set the environment file to be loaded during bootstrapping."""
        self._environment_file = file
        return self

    def environment_file(self) -> str:
        return self._environment_file or '.env'

    def environment_file_path(self) -> str:
        """Get the fully qualified path to the environment file."""
        return os.path.join(self.environment_path(), self.environment_file())

    def environment(self, *environments: Union[str, List[str]]) -> Union[str, bool]:
        """Get or check the current application environment."""
        current = self._instances.get('env', 'production')

        if not environments:
            return current

        patterns: List[str] = []
        for environment in environments:
            patterns.extend(Arr.wrap(environment))

        return any(fnmatch.fnmatchcase(current, pattern) for pattern in patterns)

    def is_local(self) -> bool:
        return self.environment() == 'local'

    def is_production(self) -> bool:
        return self.environment() == 'production'

    def detect_environment(self, callback: Callable[[], str]) -> str:
        """Detect the application's current environment."""
        environment = None

        if self.running_in_console():
            environment = self.console_environment_option()

        self.instance('env', environment or callback())
        return self._instances['env']

    def console_environment_option(self) -> Optional[str]:
        """Get the value of an `--env` command line option, if any."""
        args = sys.argv[1:]
        for index, arg in enumerate(args):
            if arg.startswith('--env='):
                return arg.split('=', 1)[1]
            if arg == '--env' and index + 1 < len(args):
                return args[index + 1]
        return None

    def running_in_console(self) -> bool:
        """Determine if the application is running in the console."""
        if self._is_running_in_console is None:
            self._is_running_in_console = Env.get('APP_RUNNING_IN_CONSOLE', False) in (True, '1')
        return self._is_running_in_console

    def running_unit_tests(self) -> bool:
        """Determine if the application is running unit tests."""
        return self._instances.get('env') == 'testing'

    def has_debug_mode_enabled(self) -> bool:
        return bool(self.bound('config') and self.make('config').get('app.debug'))

    # ------------------------------------------------------------------
    # Service providers
    # ------------------------------------------------------------------

    def register_configured_providers(self) -> None:
        """Register all of the configured providers."""
        configured = self.make('config').get('app.providers', []) or []

        framework, application = Arr.partition(
            list(configured), lambda provider: provider_key(provider).startswith('hybrid.')
        )
        packages = self.make(PackageManifest).providers()

        providers = Arr.unique([provider_key(p) for p in framework + packages + application])

        ProviderRepository(self, Filesystem(), self.get_cached_services_path()).load(providers)

        self._fire_app_callbacks(self._registered_callbacks)

    def register(self, provider: ProviderReference, force: bool = False) -> ServiceProvider:
        """Register a service provider with the application."""
        registered = self.get_provider(provider)
        if registered is not None and not force:
            return registered

        if not isinstance(provider, ServiceProvider):
            provider = self.resolve_provider(provider)

        key = provider_key(provider)

        try:
            provider.register()
        except Exception as e:
            self.logger.error(f"Failed to register provider {key}: {e}")
            raise

        for abstract, concrete in provider.bindings().items():
            self.bind(abstract, concrete)

        for abstract, concrete in provider.singletons().items():
            self.singleton(abstract, concrete)

        self._mark_as_registered(provider)
        self.logger.debug(f"Registered provider: {key}")

        # Providers registered after boot must still be booted.
        if self.is_booted():
            self.boot_provider(provider)

        return provider

    def get_provider(self, provider: ProviderReference) -> Optional[ServiceProvider]:
        """Get the registered service provider instance if it exists."""
        return self._service_providers.get(provider_key(provider))

    def get_providers(self, provider: Union[str, Type[ServiceProvider]]) -> List[ServiceProvider]:
        """Get the registered service provider instances of a class."""
        if isinstance(provider, str):
            provider = resolve_provider_class(provider)
        return [p for p in self._service_providers.values() if isinstance(p, provider)]

    def resolve_provider(self, provider: ProviderReference) -> ServiceProvider:
        """Create a new provider instance."""
        if isinstance(provider, ServiceProvider):
            return provider

        if isinstance(provider, str):
            provider = resolve_provider_class(provider)

        if not (inspect.isclass(provider) and issubclass(provider, ServiceProvider)):
            raise ProviderResolutionException(f"[{provider!r}] is not a service provider.")

        return provider(self)

    def _mark_as_registered(self, provider: ServiceProvider) -> None:
        key = provider_key(provider)
        # A forced re-registration keeps the original position.
        self._service_providers[key] = provider
        self._loaded_providers[key] = True
        provider.mark_as_registered()

    def load_deferred_providers(self) -> None:
        """Load and boot all of the remaining deferred providers."""
        for service in list(self._deferred_services):
            self.load_deferred_provider(service)

        self._deferred_services = {}

    def load_deferred_provider(self, service: Any) -> None:
        """Load the provider for a deferred service."""
        if not self.is_deferred_service(service):
            return

        provider = self._deferred_services[service]

        if not self.provider_is_loaded(provider):
            self.register_deferred_provider(provider, service)
        else:
            self._forget_deferred_services_of(provider)

    def register_deferred_provider(self, provider: ProviderReference, service: Any = None) -> ServiceProvider:
        """Register a deferred provider and service."""
        if service is not None:
            self._deferred_services.pop(service, None)

        instance = self.register(self.resolve_provider(provider))
        self._forget_deferred_services_of(provider)

        self.logger.debug(f"Loaded deferred provider: {provider_key(provider)}")
        return instance

    def _forget_deferred_services_of(self, provider: ProviderReference) -> None:
        key = provider_key(provider)
        self._deferred_services = {
            service: deferred for service, deferred in self._deferred_services.items()
            if provider_key(deferred) != key
        }

    def provider_is_loaded(self, provider: ProviderReference) -> bool:
        """Determine if the given service provider is loaded."""
        return provider_key(provider) in self._loaded_providers

    def get_loaded_providers(self) -> Dict[str, bool]:
        return dict(self._loaded_providers)

    def get_deferred_services(self) -> Dict[Any, ProviderReference]:
        return dict(self._deferred_services)

    def set_deferred_services(self, services: Dict[Any, ProviderReference]) -> None:
        self._deferred_services = dict(services)

    def add_deferred_services(self, services: Dict[Any, ProviderReference]) -> None:
        self._deferred_services.update(services)

    def remove_deferred_services(self, services: List[Any]) -> None:
        for service in services:
            self._deferred_services.pop(service, None)

    def is_deferred_service(self, service: Any) -> bool:
        return service in self._deferred_services

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(
        self,
        abstract: Abstract,
        parameters: Optional[Dict[str, Any]] = None,
        raise_events: bool = True,
    ) -> Any:
        """Resolve the given type, loading its deferred provider first."""
        abstract = self.get_alias(abstract)
        self._load_deferred_provider_if_needed(abstract)
        return super().resolve(abstract, parameters, raise_events)

    def _load_deferred_provider_if_needed(self, abstract: Abstract) -> None:
        if self.is_deferred_service(abstract) and abstract not in self._instances:
            self.load_deferred_provider(abstract)

    def bound(self, abstract: Abstract) -> bool:
        """Determine if the given type is bound, including deferred services."""
        return self.is_deferred_service(abstract) or super().bound(abstract)

    # ------------------------------------------------------------------
    # Booting
    # ------------------------------------------------------------------

    def is_booted(self) -> bool:
        return self._booted

    def boot(self) -> None:
        """Boot the application's service providers."""
        if self.is_booted():
            return

        self.logger.debug("Booting application...")

        self._fire_app_callbacks(self._booting_callbacks)

        index = 0
        # Providers registered while booting are booted in the same pass.
        while index < len(self._service_providers):
            provider = list(self._service_providers.values())[index]
            self.boot_provider(provider)
            index += 1

        self._booted = True

        self._fire_app_callbacks(self._booted_callbacks)

        self.logger.debug(f"Application booted with {len(self._service_providers)} providers")

    def boot_provider(self, provider: ServiceProvider) -> None:
        """Boot the given service provider."""
        if provider.is_booted():
            return

        provider.call_booting_callbacks()

        try:
            self.call(provider.boot)
        except Exception as e:
            self.logger.error(f"Error booting provider {provider_key(provider)}: {e}")
            raise

        provider.mark_as_booted()
        provider.call_booted_callbacks()

    def booting(self, callback: AppCallback) -> None:
        """Register a new boot listener."""
        self._booting_callbacks.append(callback)

    def booted(self, callback: AppCallback) -> None:
        """Register a new "booted" listener, called at once if already booted."""
        if self.is_booted():
            callback(self)
            return

        self._booted_callbacks.append(callback)

    def registered(self, callback: AppCallback) -> None:
        """Register a new registered listener."""
        self._registered_callbacks.append(callback)

    def _fire_app_callbacks(self, callbacks: List[AppCallback]) -> None:
        index = 0
        while index < len(callbacks):
            callbacks[index](self)
            index += 1

    # ------------------------------------------------------------------
    # Caches
    # ------------------------------------------------------------------

    def get_cached_services_path(self) -> str:
        """Get the path to the cached services manifest."""
        return self._normalize_cache_path('APP_SERVICES_CACHE', 'cache/services.json')

    def get_cached_packages_path(self) -> str:
        """Get the path to the cached packages manifest."""
        return self._normalize_cache_path('APP_PACKAGES_CACHE', 'cache/packages.json')

    def get_cached_config_path(self) -> str:
        """Get the path to the configuration cache file."""
        return self._normalize_cache_path('APP_CONFIG_CACHE', 'cache/config.json')

    def configuration_is_cached(self) -> bool:
        return os.path.isfile(self.get_cached_config_path())

    def _normalize_cache_path(self, key: str, default: str) -> str:
        value = Env.raw(key)

        if not value:
            return self.bootstrap_path(default)

        return value if os.path.isabs(value) else self.base_path(value)

    # ------------------------------------------------------------------
    # Termination
    # ------------------------------------------------------------------

    def terminating(self, callback: Callable[..., Any]) -> Application:
        """Register a terminating callback with the application."""
        self._terminating_callbacks.append(callback)
        return self

    def terminate(self) -> None:
        """Terminate the application."""
        index = 0
        while index < len(self._terminating_callbacks):
            self.call(self._terminating_callbacks[index])
            index += 1

        self.logger.debug("Application terminated")

    def flush(self) -> None:
        """Flush the container of all bindings and resolved instances."""
        super().flush()

        self._has_been_bootstrapped = False
        self._booted = False
        self._booting_callbacks = []
        self._booted_callbacks = []
        self._registered_callbacks = []
        self._terminating_callbacks = []
        self._service_providers = {}
        self._loaded_providers = {}
        self._deferred_services = {}

    # ------------------------------------------------------------------
    # Namespace
    # ------------------------------------------------------------------

    def get_namespace(self) -> str:
        """Get the application package name from `pyproject.toml`."""
        if self._namespace is not None:
            return self._namespace

        pyproject = Path(self.base_path('pyproject.toml'))

        try:
            data = tomllib.loads(pyproject.read_text(encoding='utf-8'))
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise NamespaceDetectionException() from e

        app_path = os.path.realpath(self.path())

        for package in self._declared_packages(data):
            if os.path.realpath(self.base_path(package.replace('.', os.sep))) == app_path:
                self._namespace = package
                return package

        raise NamespaceDetectionException()

    def _declared_packages(self, data: Dict[str, Any]) -> List[str]:
        tool = data.get('tool', {})
        packages: List[str] = []

        declared = Arr.get(tool, 'setuptools.packages', [])
        if isinstance(declared, list):
            packages.extend(declared)
        elif isinstance(declared, dict):
            packages.extend(
                pattern.rstrip('*').rstrip('.') for pattern in Arr.get(declared, 'find.include', [])
            )

        packages.extend(entry['include'] for entry in Arr.get(tool, 'poetry.packages', []) if 'include' in entry)

        return [package for package in packages if package]

    def __repr__(self) -> str:
        return f"<Application base_path={self._base_path!r} booted={self._booted}>"


def app(abstract: Optional[Abstract] = None, parameters: Optional[Dict[str, Any]] = None) -> Any:
    """Get the current application, or resolve an entry from it."""
    container = Container.get_instance()

    if abstract is None:
        return container

    return container.make(abstract, parameters)


def config(key: Union[str, Dict[str, Any], None] = None, default: Any = None) -> Any:
    """Get or set configuration values on the current application."""
    repository = app('config')

    if key is None:
        return repository

    if isinstance(key, dict):
        repository.set(key)
        return None

    return repository.get(key, default)
