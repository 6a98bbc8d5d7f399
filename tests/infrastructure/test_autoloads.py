# tests/infrastructure/test_autoloads.py

import pytest

from bootstrap.exceptions import AutoloadError, is_fatal
from infrastructure.autoloads import load_autoloads


def test_loads_manifest(tmp_path):
    path = tmp_path / 'init.27.1.yaml'
    path.write_text(
        "host_version: '27.1'\n"
        "profile: work@v2\n"
        "generated_at: 2024-05-01T12:00:00\n"
        "autoloads:\n"
        "  greet: greeting\n",
        encoding='utf-8',
    )
    manifest = load_autoloads(path)
    assert manifest.host_version == '27.1'
    assert manifest.profile == 'work@v2'
    assert manifest.generated_at.year == 2024
    assert manifest.autoloads == {'greet': 'greeting'}


@pytest.mark.parametrize('content,reason', [
    (None, 'missing'),
    ('host_version: [27\n', 'not valid YAML'),
    ('- just\n- a list\n', 'mapping'),
    ('autoloads: {}\n', 'corrupt'),
    (b'\xff\xfehost_version: 27.1\n', 'not valid UTF-8'),
])
def test_bad_files_raise_non_fatal_autoload_error(tmp_path, content, reason):
    path = tmp_path / 'autoloads.27.1.yaml'
    if isinstance(content, bytes):
        path.write_bytes(content)
    elif content is not None:
        path.write_text(content, encoding='utf-8')

    with pytest.raises(AutoloadError) as excinfo:
        load_autoloads(path)

    assert reason in excinfo.value.message
    assert excinfo.value.path == str(path)
    assert not is_fatal(excinfo.value)
