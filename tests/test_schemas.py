from datetime import datetime, timezone
from types import SimpleNamespace

from schemas.message import MessageRead
from schemas.user import ProfileRead


def test_read_schemas_build_from_attributes():
    now = datetime(2024, 1, 1, tzinfo=timezone.utc)
    row = SimpleNamespace(id="m1", from_user_id="a", to_user_id="b", message="hi", created_at=now)

    assert MessageRead.model_validate(row).message == "hi"
    assert MessageRead.model_config["from_attributes"] is True
    assert ProfileRead.model_config["from_attributes"] is True
