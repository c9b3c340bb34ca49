from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List
from unittest import mock

import pytest

from hybrid.Config.Repository import Repository
from hybrid.Contracts.DeferrableProvider import DeferrableProvider
from hybrid.Filesystem.Filesystem import Filesystem
from hybrid.Foundation.Application import Application
from hybrid.Foundation.PackageManifest import PackageManifest
from hybrid.Foundation.ProviderRepository import ProviderRepository
from hybrid.Foundation.ServiceProvider import ServiceProvider, provider_key


class Report:
    pass


class Recorder:
    events: List[str] = []


class EagerServiceProvider(ServiceProvider):

    def register(self) -> None:
        Recorder.events.append('eager.register')


class ReportServiceProvider(ServiceProvider, DeferrableProvider):
    created = 0

    def __init__(self, app: Application) -> None:
        super().__init__(app)
        ReportServiceProvider.created += 1

    def register(self) -> None:
        Recorder.events.append('report.register')
        self.app.singleton(Report, lambda app: Report())

    def provides(self) -> List[Any]:
        return [Report, 'reports']


EAGER = provider_key(EagerServiceProvider)
REPORTS = provider_key(ReportServiceProvider)


@pytest.fixture(autouse=True)
def reset_recorder() -> None:
    Recorder.events = []
    ReportServiceProvider.created = 0


@pytest.fixture
def manifest_path(base_path: Path) -> Path:
    return base_path / 'bootstrap' / 'cache' / 'services.json'


class TestProviderRepository:
    """Eager and deferred providers, and the services cache."""

    def test_compiles_and_writes_manifest(self, app: Application, manifest_path: Path) -> None:
        repository = ProviderRepository(app, Filesystem(), str(manifest_path))

        repository.load([EAGER, REPORTS])

        written = json.loads(manifest_path.read_text())
        report_class = f'{Report.__module__}:{Report.__qualname__}'
        assert written == {EAGER: [], REPORTS: [{'class': report_class}, 'reports']}

        assert Recorder.events == ['eager.register']
        assert app.is_deferred_service(Report)
        assert app.is_deferred_service('reports')

    def test_lazy_provider_scenario(self, app: Application, manifest_path: Path) -> None:
        ProviderRepository(app, Filesystem(), str(manifest_path)).load([EAGER, REPORTS])
        app.boot()
        assert 'report.register' not in Recorder.events

        report = app.make(Report)

        assert isinstance(report, Report)
        assert app.make(Report) is report
        assert Recorder.events == ['eager.register', 'report.register']
        assert not app.is_deferred_service('reports')
        assert app.get_provider(ReportServiceProvider).is_booted()

    def test_reuses_cached_manifest(self, app: Application, manifest_path: Path) -> None:
        ProviderRepository(app, Filesystem(), str(manifest_path)).load([EAGER, REPORTS])
        created = ReportServiceProvider.created

        second = Application(str(manifest_path.parents[2]))
        ProviderRepository(second, Filesystem(), str(manifest_path)).load([EAGER, REPORTS])

        assert ReportServiceProvider.created == created
        assert second.is_deferred_service(Report)

    def test_recompiles_when_providers_change(self, app: Application, manifest_path: Path) -> None:
        ProviderRepository(app, Filesystem(), str(manifest_path)).load([REPORTS])

        ProviderRepository(app, Filesystem(), str(manifest_path)).load([EAGER, REPORTS])

        assert list(json.loads(manifest_path.read_text())) == [EAGER, REPORTS]

    def test_without_manifest_path_nothing_is_written(self, app: Application, manifest_path: Path) -> None:
        ProviderRepository(app, Filesystem()).load([EAGER])

        assert not manifest_path.exists()
        assert app.provider_is_loaded(EagerServiceProvider)


class TestConfiguredProviders:
    """`register_configured_providers` ordering and callbacks."""

    def test_framework_providers_come_first(self, app: Application) -> None:
        app.instance('config', Repository({'app': {'providers': [
            EagerServiceProvider,
            'hybrid.Providers.LogServiceProvider:LogServiceProvider',
        ]}}))
        registered: List[Application] = []
        app.registered(registered.append)

        app.register_configured_providers()

        written = json.loads(Path(app.get_cached_services_path()).read_text())
        assert list(written) == ['hybrid.Providers.LogServiceProvider:LogServiceProvider', EAGER]
        assert app.is_deferred_service('log')
        assert registered == [app]

    def test_package_providers_sit_between(self, app: Application) -> None:
        app.instance('config', Repository({'app': {'providers': [
            EagerServiceProvider,
            'hybrid.Providers.FilesystemServiceProvider.FilesystemServiceProvider',
        ]}}))
        manifest = app.make(PackageManifest)
        manifest.manifest = {'acme-reports': {'providers': [REPORTS], 'aliases': {}}}

        app.register_configured_providers()

        written = json.loads(Path(app.get_cached_services_path()).read_text())
        assert list(written) == [
            'hybrid.Providers.FilesystemServiceProvider:FilesystemServiceProvider',
            REPORTS,
            EAGER,
        ]


class FakeDistribution:
    def __init__(self, name: str) -> None:
        self.name = name


class FakeEntryPoint:
    def __init__(self, name: str, value: str, dist: str) -> None:
        self.name = name
        self.value = value
        self.dist = FakeDistribution(dist)
        self.module = value.split(':')[0]


class TestPackageManifest:
    """Package discovery through entry points."""

    def entry_points(self, group: str) -> List[FakeEntryPoint]:
        return {
            'hybrid.providers': [
                FakeEntryPoint('reports', REPORTS, 'acme-reports'),
                FakeEntryPoint('audit', 'acme_audit.Provider:AuditServiceProvider', 'acme-audit'),
            ],
            'hybrid.aliases': [
                FakeEntryPoint('Report', 'acme_reports.Facades:Report', 'acme-reports'),
            ],
        }[group]

    def test_builds_and_caches_manifest(self, base_path: Path) -> None:
        path = base_path / 'bootstrap' / 'cache' / 'packages.json'
        manifest = PackageManifest(Filesystem(), str(base_path), str(path))

        with mock.patch('hybrid.Foundation.PackageManifest.entry_points', side_effect=self.entry_points):
            providers = manifest.providers()

        assert providers == [REPORTS, 'acme_audit.Provider:AuditServiceProvider']
        assert manifest.aliases() == {'Report': 'acme_reports.Facades:Report'}
        assert json.loads(path.read_text())['acme-reports']['providers'] == [REPORTS]

    def test_cached_manifest_is_not_rebuilt(self, base_path: Path) -> None:
        path = base_path / 'packages.json'
        path.write_text(json.dumps({'cached': {'providers': ['cached.Provider:Provider'], 'aliases': {}}}))
        manifest = PackageManifest(Filesystem(), str(base_path), str(path))

        with mock.patch('hybrid.Foundation.PackageManifest.entry_points') as entry_points:
            assert manifest.providers() == ['cached.Provider:Provider']

        entry_points.assert_not_called()

    def test_dont_discover(self, base_path: Path) -> None:
        (base_path / 'pyproject.toml').write_text('[tool.hybrid]\ndont-discover = ["acme-audit"]\n')
        manifest = PackageManifest(Filesystem(), str(base_path), str(base_path / 'packages.json'))

        with mock.patch('hybrid.Foundation.PackageManifest.entry_points', side_effect=self.entry_points):
            assert manifest.providers() == [REPORTS]

    def test_dont_discover_wildcard(self, base_path: Path) -> None:
        (base_path / 'pyproject.toml').write_text('[tool.hybrid]\ndont-discover = ["*"]\n')
        manifest = PackageManifest(Filesystem(), str(base_path), str(base_path / 'packages.json'))

        with mock.patch('hybrid.Foundation.PackageManifest.entry_points', side_effect=self.entry_points):
            assert manifest.providers() == []
            assert manifest.aliases() == {}
