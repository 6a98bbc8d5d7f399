# tests/configs/test_config_loader.py

import pytest

from bootstrap.exceptions import UserError
from configs.config_loader import ConfigLoader
from configs.config_utils import ConfigMerger


def write_config(root, env, text):
    path = root / 'configs' / env / 'global_app_config.yaml'
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding='utf-8')
    return path


class TestConfigMerger:

    def test_nested_dicts_merge_and_lists_replace(self):
        base = {'a': 1, 'nested': {'x': 1, 'y': [1, 2]}}
        merged = ConfigMerger.merge(base, {'nested': {'y': [3]}, 'b': 2})
        assert merged == {'a': 1, 'b': 2, 'nested': {'x': 1, 'y': [3]}}
        assert base == {'a': 1, 'nested': {'x': 1, 'y': [1, 2]}}

    def test_strict_keys(self):
        with pytest.raises(ValueError):
            ConfigMerger.merge({'a': 1}, {'b': 2}, strict_keys=True)

    def test_non_dict_override_returns_base(self):
        assert ConfigMerger.merge({'a': 1}, ['nope']) == {'a': 1}


class TestConfigLoader:

    def test_packaged_defaults(self):
        settings = ConfigLoader(environ={}).load_settings()
        assert settings.env == 'default'
        assert settings.minimum_host_version == '27.1'
        assert settings.optimizer.required_path_handler == 'compressed_file_handler'
        assert settings.fatal_hook_points == []

    def test_env_layer_overrides_defaults(self, tmp_path):
        write_config(tmp_path, 'default', 'app_name: kindling\noptimizer:\n  enabled: true\n')
        write_config(tmp_path, 'ci', 'optimizer:\n  enabled: false\n')

        settings = ConfigLoader(package_root=tmp_path, environ={}).load_settings(env='ci')

        assert settings.env == 'ci'
        assert settings.optimizer.enabled is False

    def test_caller_overrides_win(self, tmp_path):
        write_config(tmp_path, 'default', 'sync_command: kindling sync\n')
        settings = ConfigLoader(package_root=tmp_path, environ={}).load_settings(
            overrides={'sync_command': 'make sync'})
        assert settings.sync_command == 'make sync'

    def test_env_expansion(self, tmp_path):
        write_config(tmp_path, 'default', 'log_level: ${KINDLING_LOG_LEVEL:-INFO}\ninstall_docs: ${DOCS_URL}\n')

        cfg = ConfigLoader(package_root=tmp_path, environ={'KINDLING_LOG_LEVEL': 'DEBUG'}).load_global_config()

        assert cfg['log_level'] == 'DEBUG'
        assert cfg['install_docs'] == '${DOCS_URL}'

    def test_missing_files_fall_back_to_builtin_defaults(self, tmp_path):
        settings = ConfigLoader(package_root=tmp_path, environ={}).load_settings(env='nowhere')
        assert settings.env == 'nowhere'
        assert settings.app_name == 'kindling'

    def test_invalid_yaml_is_a_user_error(self, tmp_path):
        path = write_config(tmp_path, 'default', 'app_name: [unclosed\n')
        with pytest.raises(UserError) as excinfo:
            ConfigLoader(package_root=tmp_path, environ={}).load_global_config()
        assert str(path) in excinfo.value.remediation

    def test_unknown_keys_are_rejected(self, tmp_path):
        write_config(tmp_path, 'default', 'no_such_setting: 1\n')
        with pytest.raises(UserError) as excinfo:
            ConfigLoader(package_root=tmp_path, environ={}).load_settings()
        assert 'no_such_setting' in excinfo.value.remediation

    def test_malformed_minimum_version_is_rejected(self, tmp_path):
        with pytest.raises(UserError):
            ConfigLoader(package_root=tmp_path, environ={}).load_settings(
                overrides={'minimum_host_version': 'twenty-seven'})

    def test_unknown_fatal_hook_point_is_a_user_error(self, tmp_path):
        write_config(tmp_path, 'default', 'fatal_hook_points: [post-user-confg]\n')
        with pytest.raises(UserError) as excinfo:
            ConfigLoader(package_root=tmp_path, environ={}).load_settings()
        assert 'fatal_hook_points' in excinfo.value.remediation
        assert 'post-user-confg' in excinfo.value.remediation

    def test_known_fatal_hook_points_accepted(self, tmp_path):
        settings = ConfigLoader(package_root=tmp_path, environ={}).load_settings(
            overrides={'fatal_hook_points': ['post-module-init', 'post-user-config']})
        assert settings.fatal_hook_points == ['post-module-init', 'post-user-config']
