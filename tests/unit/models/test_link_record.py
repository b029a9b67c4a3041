from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta, UTC

import pytest
from freezegun import freeze_time

from linkshortener.constants import TTL
from linkshortener.models import LinkRecord, ValidationResult, CreatedLink


@freeze_time('2025-10-15 12:00:00')
def test_new_link_record_expires_after_retention_period():
    now = datetime.now(UTC)

    record = LinkRecord.new(shortcode='aZ3kP0q', target='https://example.com/', created_at=now)

    assert record.created_at == now
    assert record.expires_at == datetime(2025, 11, 14, 12, 0, tzinfo=UTC)
    assert record.expires_at - record.created_at == timedelta(seconds=TTL.LINK_RECORD)
    assert record.click_count == 0


def test_link_record_is_immutable():
    record = LinkRecord.new(shortcode='aZ3kP0q', target='https://example.com/', created_at=datetime.now(UTC))

    with pytest.raises(FrozenInstanceError):
        record.target = 'http://10.0.0.1/'


def test_validation_result_defaults():
    assert ValidationResult(valid=True).reason is None
    assert ValidationResult(valid=False, reason='Invalid URL') == ValidationResult(False, 'Invalid URL')


def test_created_link():
    link = CreatedLink(shortcode='aZ3kP0q', target='https://example.com/')
    assert (link.shortcode, link.target) == ('aZ3kP0q', 'https://example.com/')
