import dataclasses
import datetime
import enum
from typing import Any, Dict, List, Optional, Tuple, Union

import msgspec
import pytest

import arangovst
from arangovst import serde
from arangovst.entities import CollectionEntity, CollectionType, CursorEntity, DocumentEntity


class Color(enum.Enum):
    RED = 'red'
    GREEN = 'green'


class Part(msgspec.Struct):
    name: str
    weight: float = 1.0
    tags: List[str] = []


@dataclasses.dataclass
class Widget:
    name: str
    serial_number: int = 0
    color: Optional[Color] = None


class Plain:
    name: str
    count: int
    label: str = 'unlabeled'


class Shelf:
    plain: Plain
    widgets: List[Widget]


def test_scalars():

    assert serde.deserialize(5, int) == 5
    assert serde.deserialize(5.0, int) == 5
    assert serde.deserialize(5, float) == 5.0
    assert isinstance(serde.deserialize(5, float), float)
    assert serde.deserialize('text', str) == 'text'
    assert serde.deserialize(True, bool) == True
    assert serde.deserialize({'any': 'thing'}) == {'any': 'thing'}
    assert serde.deserialize(None, int) is None


def test_lossy():

    with pytest.raises(arangovst.DeserializationError):
        serde.deserialize(5.5, int)

    with pytest.raises(arangovst.DeserializationError):
        serde.deserialize(True, int)

    with pytest.raises(arangovst.DeserializationError):
        serde.deserialize('5', int)

    with pytest.raises(arangovst.DeserializationError):
        serde.deserialize(1, bool)


def test_widths():

    assert serde.deserialize(127, serde.Int8) == 127
    assert serde.deserialize(2 ** 64 - 1, serde.UInt64) == 2 ** 64 - 1

    with pytest.raises(arangovst.DeserializationError):
        serde.deserialize(128, serde.Int8)

    with pytest.raises(arangovst.DeserializationError):
        serde.deserialize(-1, serde.UInt32)

    with pytest.raises(arangovst.DeserializationError):
        serde.deserialize(2 ** 31, serde.Int32)


def test_collections():

    assert serde.deserialize([1, 2.0, 3], List[int]) == [1, 2, 3]
    assert serde.deserialize([1, 'a'], Tuple[int, str]) == (1, 'a')
    assert serde.deserialize({'a': 1}, Dict[str, float]) == {'a': 1.0}

    with pytest.raises(arangovst.DeserializationError):
        serde.deserialize({'a': 1}, List[int])

    with pytest.raises(arangovst.DeserializationError):
        serde.deserialize([1, 'b'], List[int])


def test_optional():

    assert serde.deserialize(None, Optional[int]) is None
    assert serde.deserialize(3, Optional[int]) == 3


def test_enums():

    assert serde.deserialize('red', Color) == Color.RED
    assert serde.deserialize('GREEN', Color) == Color.GREEN
    assert serde.deserialize(3, CollectionType) == CollectionType.EDGES

    with pytest.raises(arangovst.DeserializationError):
        serde.deserialize('blue', Color)


def test_timestamps():

    moment = serde.deserialize('2024-05-01T12:30:00Z', datetime.datetime)
    assert moment == datetime.datetime(2024, 5, 1, 12, 30, tzinfo=datetime.timezone.utc)

    with pytest.raises(arangovst.DeserializationError):
        serde.deserialize('yesterday', datetime.datetime)


def test_struct():

    part = serde.deserialize({'name': 'bolt', 'weight': 2, 'extra': 'ignored'}, Part)

    assert part.name == 'bolt'
    assert part.weight == 2.0
    assert part.tags == []

    # Missing fields take their default, or the zero of their type.

    part = serde.deserialize({}, Part)
    assert part.name == ''
    assert part.weight == 1.0


def test_defaults_are_not_shared():

    first = serde.deserialize({'name': 'a'}, Part)
    first.tags.append('changed')

    second = serde.deserialize({'name': 'b'}, Part)
    assert second.tags == []


def test_strict():

    with pytest.raises(arangovst.DeserializationError):
        serde.deserialize({'name': 'bolt', 'extra': 1}, Part, strict=True)

    # The driver's own entities always tolerate additions by the server.

    entity = serde.deserialize({'name': 'parts', 'newField': 1}, CollectionEntity, strict=True)
    assert entity.name == 'parts'


def test_dataclass():

    widget = serde.deserialize({'name': 'knob', 'serial_number': 7, 'color': 'red'}, Widget)

    assert widget == Widget('knob', 7, Color.RED)

    widget = serde.deserialize({'name': 'knob', 'serialNumber': 8}, Widget, naming='camel')
    assert widget.serial_number == 8
    assert widget.color is None


def test_plain_class():

    plain = serde.deserialize({'name': 'x', 'count': 3}, Plain)

    assert isinstance(plain, Plain)
    assert plain.name == 'x'
    assert plain.count == 3
    assert plain.label == 'unlabeled'

    plain = serde.deserialize({'name': 'y'}, Plain)
    assert plain.count == 0


def test_nested():

    shelf = serde.deserialize({'plain': {'name': 'p', 'count': 2.0},
                               'widgets': [{'name': 'w', 'color': 'GREEN'}]}, Shelf)

    assert shelf.plain.count == 2
    assert shelf.widgets == [Widget('w', 0, Color.GREEN)]

    with pytest.raises(arangovst.DeserializationError):
        serde.deserialize({'plain': {'name': 'p', 'count': 2.5}, 'widgets': []}, Shelf)


def test_nulls():
    """ A null field counts as missing, unless the field accepts null.
    """

    part = serde.deserialize({'name': None, 'weight': None, 'tags': None}, Part)
    assert part == Part('', 1.0, [])

    widget = serde.deserialize({'name': 'knob', 'color': None}, Widget)
    assert widget.color is None

    assert serde.deserialize([1, None], List[int]) == [1, 0]
    assert serde.deserialize({'a': None}, Dict[str, Optional[int]]) == {'a': None}


def test_unions():

    assert serde.deserialize(4.0, Union[int, str]) == 4
    assert serde.deserialize(4.0, Union[int, float]) == 4.0
    assert serde.deserialize({'name': 'bolt'}, Union[Part, str]).name == 'bolt'
    assert serde.deserialize(datetime.date(2024, 1, 2), datetime.date) == datetime.date(2024, 1, 2)


def test_naming():

    assert serde.camel('serial_number') == 'serialNumber'
    assert serde.camel('_key') == '_key'
    assert serde.camel('_old_rev') == '_oldRev'
    assert serde.camel('name') == 'name'

    upper = serde.deserialize({'NAME': 'z', 'COUNT': 1}, Plain, naming=str.upper)
    assert upper.name == 'z'

    with pytest.raises(ValueError):
        serde.deserialize({}, Plain, naming='kebab')


def test_entities():

    document = serde.deserialize({'_key': 'k', '_id': 'c/k', '_rev': '1'}, DocumentEntity)
    assert document.key == 'k'
    assert document.id == 'c/k'

    cursor = serde.deserialize({'id': '55', 'hasMore': True, 'result': [1, 2]}, CursorEntity)
    assert cursor.has_more == True
    assert cursor.result == [1, 2]
    assert cursor.extra == {}


def test_error_paths():

    with pytest.raises(arangovst.DeserializationError) as raised:
        serde.deserialize({'parts': [{'name': 'a', 'weight': 'heavy'}]}, Dict[str, List[Part]])

    assert 'weight' in str(raised.value)


def test_decoder():

    decode = serde.decoder(List[int], 'result')
    assert decode({'result': [1, 2], 'other': 'x'}) == [1, 2]

    with pytest.raises(arangovst.DeserializationError):
        decode({'other': 'x'})

    assert serde.void({'anything': True}) is None
    assert serde.as_decoder(None)({'raw': 1}) == {'raw': 1}
    assert serde.as_decoder(int)(4.0) == 4

    custom = serde.as_decoder(lambda body: body['x'])
    assert custom({'x': 9}) == 9

    with pytest.raises(TypeError):
        serde.as_decoder(42)


def test_zero():

    assert serde.zero(int) == 0
    assert serde.zero(str) == ''
    assert serde.zero(List[int]) == []
    assert serde.zero(Dict[str, Any]) == {}
    assert serde.zero(Optional[int]) is None
    assert serde.zero(Part) is None


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
