import pytest

from eventhorizon.entity import NIL_ID, Entity, is_nil_id


class _Item(Entity):
    def __init__(self, id):
        self._id = id

    def entity_id(self):
        return self._id


@pytest.mark.parametrize(
    "value, expected",
    [
        ("", True),
        (NIL_ID, True),
        ("00000000-0000-0000-0000-000000000000", True),
        ("c1138e5f-f6fb-4dd0-8e79-255c6c8d3756", False),
        ("S1:C1", False),
    ],
)
def test_is_nil_id(value, expected):
    assert is_nil_id(value) is expected


def test_entity_with_nil_id_is_nil():
    assert is_nil_id(_Item(NIL_ID).entity_id()) is True
    assert is_nil_id(_Item("S1:C1").entity_id()) is False


def test_entity_is_abstract():
    with pytest.raises(TypeError):
        Entity()