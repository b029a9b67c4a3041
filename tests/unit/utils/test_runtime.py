import pytest
from pytest import MonkeyPatch

from linkshortener.constants import ENV
from linkshortener.utils.runtime import running_locally


@pytest.mark.parametrize(
    'app_env, sam_local, expected',
    [
        ('local', None, True),
        ('LOCAL', None, True),
        ('prod', 'true', True),
        ('prod', None, False),
        ('dev', 'false', False),
    ],
)
def test_running_locally(monkeypatch: MonkeyPatch, app_env, sam_local, expected):
    monkeypatch.setenv(ENV.App.APP_ENV, app_env)
    if sam_local is not None:
        monkeypatch.setenv(ENV.App.AWS_SAM_LOCAL, sam_local)

    assert running_locally() is expected
