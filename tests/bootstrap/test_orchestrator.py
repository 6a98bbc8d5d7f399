# tests/bootstrap/test_orchestrator.py

"""
End-to-end bootstrap runs against a fake host.

run this test with:
python -m pytest tests/bootstrap/test_orchestrator.py -v
"""

import pytest

from bootstrap.config.bootstrap_config import BootstrapConfig
from bootstrap.exceptions import (
    AutoloadError,
    CoreError,
    HookError,
    ModuleError,
    ProfileError,
    UserError,
    VersionMismatchError,
    VersionTooOldError,
)
from bootstrap.main import BootstrapOrchestrator, bootstrap, bootstrap_kindling
from bootstrap.optimizer import INHIBIT_MESSAGE, INHIBIT_REDISPLAY, LOAD_SUFFIXES, PATH_HANDLERS
from bootstrap.signals.lifecycle_hooks import LIFECYCLE_ORDER, POST_MODULE_INIT, POST_UI_READY
from configs.settings import KindlingSettings
from core.runtime_config import RuntimeConfig
from domain.host import HostInfo
from infrastructure.feature_flags import Capability

ORIGINALS = {
    PATH_HANDLERS: [('\\.gz\\Z', 'compressed_file_handler'), ('\\A/ssh:', 'remote_handler')],
    INHIBIT_REDISPLAY: False,
    INHIBIT_MESSAGE: False,
    LOAD_SUFFIXES: ['.so', '.pyc', '.py'],
}


def write_autoloads(path, host_version='27.1'):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"host_version: '{host_version}'\nautoloads:\n  greet: greeting\n", encoding='utf-8')


def variables(runtime):
    return {name: runtime.get(name) for name in ORIGINALS}


@pytest.fixture
def calls():
    return []


@pytest.fixture
def runtime(calls):
    return RuntimeConfig(
        variables={**ORIGINALS, 'toolbar_enabled': True},
        functions={'setup_toolbar': lambda: calls.append('toolbar')},
    )


@pytest.fixture
def environ(tmp_path):
    return {'HOME': str(tmp_path / 'home')}


@pytest.fixture
def make_config(tmp_path, runtime, environ, calls):
    def _make(version='27.1', settings=None, **overrides):
        params = dict(
            host=HostInfo(version=version, builtins=frozenset({'module_load', 'json_parse_string'})),
            install_root=tmp_path,
            runtime=runtime,
            environ=environ,
            settings=settings or KindlingSettings(),
            init_modules=lambda: calls.append('init-modules'),
            configure_modules=lambda: calls.append('configure-modules'),
            load_user_config=lambda: calls.append('user-config'),
        )
        params.update(overrides)
        return BootstrapConfig(**params)
    return _make


@pytest.fixture
def legacy_autoloads(tmp_path):
    path = tmp_path / '.local' / 'autoloads.27.1.yaml'
    write_autoloads(path)
    return path


class TestSuccessfulBootstrap:

    def test_full_sequence(self, make_config, runtime, calls, legacy_autoloads):
        result = bootstrap(make_config())

        assert result.success, result.errors
        assert result.sequencer.fired == list(LIFECYCLE_ORDER)
        assert variables(runtime) == ORIGINALS
        assert result.optimizer.pending() == []
        assert calls == ['init-modules', 'configure-modules', 'user-config', 'toolbar']
        assert result.context.autoloads.autoloads == {'greet': 'greeting'}

    def test_capabilities_and_deprecated_flags(self, make_config, legacy_autoloads):
        result = bootstrap(make_config())

        assert result.capabilities.has(Capability.DYNAMIC_MODULES)
        assert result.capabilities.has(Capability.JSON)
        assert not result.capabilities.has(Capability.NATIVE_COMPILATION)
        with pytest.warns(DeprecationWarning):
            assert result.deprecated_flags.MODULES is True

    def test_profile_mode(self, make_config, environ, tmp_path):
        environ['KINDLING_PROFILE'] = 'work@v2'
        write_autoloads(tmp_path / 'profiles' / 'work@v2' / 'init.27.1.yaml')

        result = bootstrap(make_config())

        assert result.success, result.errors
        assert str(result.directories.profile) == 'work@v2'
        assert result.directories.data_dir.endswith('work@v2/data/')

    def test_env_file_is_merged_into_runtime(self, make_config, runtime, tmp_path, legacy_autoloads):
        (tmp_path / '.local' / 'env').write_text('PATH=/opt/host/bin:/usr/bin\nFOO=bar\n', encoding='utf-8')

        bootstrap(make_config())

        assert runtime.get('process_environment')['FOO'] == 'bar'
        assert runtime.get('exec_path') == ['/opt/host/bin', '/usr/bin']

    def test_daemon_host_gets_no_overrides(self, make_config, runtime, legacy_autoloads):
        config = make_config(host=HostInfo(version='27.1', daemon=True))
        result = bootstrap(config)

        assert result.success
        assert result.optimizer.overrides == []
        assert len(runtime.snapshots) == 0

    def test_lifecycle_left_to_host(self, make_config, legacy_autoloads):
        result = bootstrap(make_config(run_lifecycle=False))

        assert result.sequencer.fired == []
        assert len(result.optimizer.pending()) == 4

        result.sequencer.run()
        assert result.optimizer.pending() == []

    def test_settings_loaded_from_config_files(self, tmp_path, runtime, environ, legacy_autoloads):
        result = bootstrap_kindling('27.1', tmp_path, runtime=runtime, environ=environ)

        assert result.settings.app_name == 'kindling'
        assert result.settings.log_level == 'INFO'
        assert result.run_id.startswith('bootstrap_run_')

    def test_capabilities_probed_once_per_runtime(self, make_config, legacy_autoloads):
        host = HostInfo(version='27.1', builtins=frozenset({'native_comp_available_p'}))

        first = bootstrap(make_config(host=host, native_check=lambda: True))
        second = bootstrap(make_config(host=host, native_check=lambda: False))

        assert first.capabilities.has(Capability.NATIVE_COMPILATION)
        assert second.capabilities == first.capabilities
        assert second.deprecated_flags is first.deprecated_flags


class TestFatalErrors:
    """Fatal errors abort and leave no override behind."""

    def test_old_host_aborts_before_any_override(self, make_config, runtime):
        with pytest.raises(VersionTooOldError):
            bootstrap(make_config(version='26.3'))
        assert runtime.history == []

    def test_invalid_profile_aborts(self, make_config, environ, runtime):
        environ['KINDLING_PROFILE'] = '../escape'
        with pytest.raises(ProfileError):
            bootstrap(make_config())
        assert runtime.history == []

    def test_stale_autoloads_abort(self, make_config, tmp_path):
        write_autoloads(tmp_path / '.local' / 'autoloads.27.2.yaml', host_version='27.1')
        with pytest.raises(VersionMismatchError):
            bootstrap(make_config(version='27.2.0'))

    def test_fatal_hook_failure_restores_pending_overrides(self, make_config, runtime, legacy_autoloads):
        def broken_init():
            raise RuntimeError('module init exploded')

        settings = KindlingSettings(fatal_hook_points=[POST_MODULE_INIT])
        orchestrator = BootstrapOrchestrator(make_config(settings=settings, init_modules=broken_init))

        with pytest.raises(HookError):
            orchestrator.execute_bootstrap()

        assert variables(runtime) == ORIGINALS
        assert orchestrator.context.optimizer.pending() == []
        assert POST_UI_READY not in orchestrator.context.sequencer.fired

    def test_unknown_fatal_hook_point_is_a_user_error(self, tmp_path, runtime, environ):
        with pytest.raises(UserError) as excinfo:
            bootstrap_kindling('27.1', tmp_path, runtime=runtime, environ=environ,
                               global_app_config={'fatal_hook_points': ['post-user-confg']})
        assert 'post-user-confg' in excinfo.value.remediation
        assert runtime.history == []


class TestIsolatedErrors:
    """Non-fatal errors are recorded and the sequence continues."""

    def test_module_failure_is_isolated(self, make_config, runtime, calls, legacy_autoloads):
        def broken_init():
            raise ModuleError('bad module', 'evil')

        result = bootstrap(make_config(init_modules=broken_init))

        assert not result.success
        assert [type(e) for e in result.errors] == [ModuleError]
        assert result.sequencer.fired == list(LIFECYCLE_ORDER)
        assert variables(runtime) == ORIGINALS
        assert 'user-config' in calls

    def test_user_config_failure_is_isolated(self, make_config, runtime, legacy_autoloads):
        def broken_user_config():
            raise SyntaxError('unbalanced parens')

        result = bootstrap(make_config(load_user_config=broken_user_config))

        assert isinstance(result.errors[0], HookError)
        assert runtime.get(INHIBIT_REDISPLAY) is False
        assert result.sequencer.fired == list(LIFECYCLE_ORDER)

    def test_missing_autoloads_requests_regeneration(self, make_config):
        requested = []
        result = bootstrap(make_config(regenerate_autoloads=requested.append))

        assert len(requested) == 1
        assert isinstance(requested[0], AutoloadError)
        assert isinstance(result.errors[0], AutoloadError)
        assert result.sequencer.fired == list(LIFECYCLE_ORDER)

    def test_required_env_file_missing_is_recorded(self, make_config, legacy_autoloads):
        result = bootstrap(make_config(env_file_required=True))

        assert not result.success
        assert 'env file' in result.errors[0].message

    def test_undecodable_autoloads_requests_regeneration(self, make_config, tmp_path):
        path = tmp_path / '.local' / 'autoloads.27.1.yaml'
        path.parent.mkdir(parents=True)
        path.write_bytes(b'\xff\xfe\x00garbage')
        requested = []

        result = bootstrap(make_config(regenerate_autoloads=requested.append))

        assert [type(e) for e in requested] == [AutoloadError]
        assert 'corrupt' in requested[0].message
        assert not result.success
        assert result.summary.failed_phases == 0
        assert result.sequencer.fired == list(LIFECYCLE_ORDER)

    def test_unexpected_phase_error_is_recorded(self, make_config, runtime, legacy_autoloads):
        def broken_native_check():
            raise RuntimeError('compiler probe crashed')

        host = HostInfo(version='27.1', builtins=frozenset({'native_comp_available_p'}))
        result = bootstrap(make_config(host=host, native_check=broken_native_check))

        assert not result.success
        assert result.summary.failed_phases == 1
        assert type(result.errors[0]) is CoreError
        assert result.errors[0].phase == 'CapabilityDetectionPhase'
        assert isinstance(result.errors[0].cause, RuntimeError)
        assert result.capabilities is None
        assert result.sequencer.fired == list(LIFECYCLE_ORDER)
        assert variables(runtime) == ORIGINALS
