""" Conversion of unpacked response documents into typed values. A type
    descriptor is an ordinary Python annotation: ``int``, ``List[str]``,
    ``Optional[datetime]``, a :class:`msgspec.Struct` entity, a dataclass,
    an annotated plain class, or :data:`typing.Any` for the raw document.

    The conversion itself is :func:`msgspec.convert`. Before handing the
    document over it is prepared for the rules msgspec leaves open: missing
    fields take the field default (or the zero of the field type), null
    fields count as missing, unknown fields are rejected only when *strict*
    is requested, enum members may be given by name, and integral floats
    become integers. A float with a fractional part never becomes an
    integer, and no integer escapes the range of its width.
"""

import collections.abc
import dataclasses
import enum
import types
import typing
from typing import Annotated, Any

import msgspec

from .entities import Entity
from .errors import DeserializationError


Int8 = Annotated[int, msgspec.Meta(ge=-2 ** 7, le=2 ** 7 - 1)]
Int16 = Annotated[int, msgspec.Meta(ge=-2 ** 15, le=2 ** 15 - 1)]
Int32 = Annotated[int, msgspec.Meta(ge=-2 ** 31, le=2 ** 31 - 1)]
Int64 = Annotated[int, msgspec.Meta(ge=-2 ** 63, le=2 ** 63 - 1)]
UInt8 = Annotated[int, msgspec.Meta(ge=0, le=2 ** 8 - 1)]
UInt16 = Annotated[int, msgspec.Meta(ge=0, le=2 ** 16 - 1)]
UInt32 = Annotated[int, msgspec.Meta(ge=0, le=2 ** 32 - 1)]
UInt64 = Annotated[int, msgspec.Meta(ge=0, le=2 ** 64 - 1)]

_NoneType = type(None)
builtins_type = type

_sequences = (list, tuple, set, frozenset,
              collections.abc.Sequence, collections.abc.MutableSequence,
              collections.abc.Set, collections.abc.MutableSet,
              collections.abc.Collection, collections.abc.Iterable)

_mappings = (dict, collections.abc.Mapping, collections.abc.MutableMapping)


def deserialize(value, type=Any, strict=False, naming=None):
    """ Convert the unpacked *value* to *type*. The *strict* flag rejects
        unknown fields; *naming* selects how Python attribute names of
        dataclasses and plain classes map to document keys: None for
        identical names, ``'camel'`` for camelCase, or a callable.
        Raises :class:`DeserializationError` if the value does not fit.
    """

    context = _Context(strict, naming)
    return context.convert(value, type)



def decoder(type=Any, field=None, strict=False, naming=None):
    """ Return a callable converting a response body to *type*. If *field*
        is specified, only that key of the body is converted.
    """

    def decode(body):
        value = body

        if field is not None:
            if not isinstance(body, dict) or field not in body:
                raise DeserializationError('response has no %r field' % (field,))
            value = body[field]

        return deserialize(value, type, strict, naming)

    return decode



def void(body):
    """ Decoder for responses whose body carries nothing of interest.
    """

    return None



def is_descriptor(thing):
    """ True if *thing* is a type descriptor, as opposed to a plain decoding
        function.
    """

    if thing is Any or thing is None:
        return True

    if isinstance(thing, type):
        return True

    return typing.get_origin(thing) is not None



def as_decoder(thing, strict=False, naming=None):
    """ Turn a decoder argument into a callable: None passes the body
        through untouched, a type descriptor goes through :func:`decoder`,
        anything else is assumed to already be a callable.
    """

    if thing is None:
        return _identity

    if is_descriptor(thing):
        return decoder(thing, strict=strict, naming=naming)

    if not callable(thing):
        raise TypeError('decoder must be a type or a callable, not ' + repr(thing))

    return thing



def _identity(body):
    return body



def camel(name):
    """ Convert a snake_case attribute name to camelCase. Leading
        underscores are preserved, so ``_key`` stays ``_key``.
    """

    stripped = name.lstrip('_')
    prefix = name[:len(name) - len(stripped)]

    pieces = stripped.split('_')
    first = pieces[0]
    rest = ''.join(piece[:1].upper() + piece[1:] for piece in pieces[1:])

    return prefix + first + rest



def zero(type):
    """ Return the zero value of *type*: False, 0, 0.0, the empty string or
        an empty collection; None for everything else.
    """

    origin = typing.get_origin(type)

    if origin is Annotated:
        return zero(typing.get_args(type)[0])

    if origin is not None:
        if origin in (list, collections.abc.Sequence, collections.abc.MutableSequence,
                      collections.abc.Collection, collections.abc.Iterable):
            return list()
        if origin is tuple:
            return tuple()
        if origin in (set, collections.abc.Set, collections.abc.MutableSet):
            return set()
        if origin is frozenset:
            return frozenset()
        if origin in _mappings:
            return dict()
        return None

    if type is bool:
        return False
    if type is int:
        return 0
    if type is float:
        return 0.0
    if type is str:
        return ''
    if type is bytes:
        return b''
    if type in (list, tuple, set, frozenset, dict):
        return type()

    return None



class _Context:
    """ One conversion: the document is prepared against the type
        descriptor, then converted by :func:`msgspec.convert`. Plain
        classes, which msgspec does not know, are built by :func:`hook`.
    """

    def __init__(self, strict, naming):

        self.strict = strict

        if naming is None or naming == 'snake':
            naming = _identity
        elif naming == 'camel':
            naming = camel
        elif not callable(naming):
            raise ValueError('unknown naming convention: ' + repr(naming))

        self.naming = naming


    def convert(self, value, type):

        if type is Any or type is object:
            return value

        if value is None:
            return None

        prepared = self.prepare(value, type, '$')

        try:
            return msgspec.convert(prepared, type, strict=True, dec_hook=self.hook)
        except msgspec.ValidationError as exc:
            raise DeserializationError(str(exc)) from exc
        except TypeError as exc:
            raise DeserializationError('unsupported type %r: %s' % (type, exc)) from exc


    def hook(self, type, value):
        """ Build an instance of a plain class from its prepared document.
            The attributes are set directly, without calling the
            constructor; attributes absent from the document fall back to
            the class attribute.
        """

        hints = _attributes(type)

        if len(hints) == 0:
            raise TypeError('unsupported type ' + repr(type))

        if not isinstance(value, dict):
            raise TypeError('expected object, got ' + repr(value))

        instance = type.__new__(type)

        for attribute, item in value.items():
            item = msgspec.convert(item, hints[attribute], strict=True, dec_hook=self.hook)
            setattr(instance, attribute, item)

        return instance


    def prepare(self, value, type, path):
        """ Return *value* rearranged so that :func:`msgspec.convert` accepts
            it as *type*. Anything that does not fit is left untouched for
            msgspec to reject.
        """

        origin = typing.get_origin(type)

        if origin is Annotated:
            return self.prepare(value, typing.get_args(type)[0], path)

        if type is Any or type is object or origin is typing.Literal:
            return value

        if value is None:
            if _nullable(type):
                return None
            return zero(type)

        if origin is typing.Union or origin is types.UnionType:
            return self.union(value, typing.get_args(type), path)

        if origin is not None:
            arguments = typing.get_args(type)
            if origin in _sequences:
                return self.sequence(value, origin, arguments, path)
            if origin in _mappings and len(arguments) == 2 and isinstance(value, dict):
                return dict((key, self.prepare(item, arguments[1], '%s.%s' % (path, key)))
                            for key, item in value.items())
            return value

        if type is int:
            if isinstance(value, float) and value.is_integer():
                return int(value)
            return value

        if not isinstance(type, builtins_type):
            return value

        if issubclass(type, enum.Enum):
            return _member(value, type)

        if issubclass(type, msgspec.Struct):
            specs = list()
            for field in msgspec.structs.fields(type):
                specs.append((field.encode_name, field.encode_name, field.type, field.required))

            # The driver's own entities tolerate fields added by newer servers.
            strict = self.strict and not issubclass(type, Entity)
            return self.fields(value, specs, path, strict)

        if dataclasses.is_dataclass(type):
            hints = _attributes(type)
            specs = list()
            for field in dataclasses.fields(type):
                if field.init == False:
                    continue
                required = field.default is dataclasses.MISSING and field.default_factory is dataclasses.MISSING
                specs.append((field.name, self.naming(field.name), hints.get(field.name, Any), required))

            return self.fields(value, specs, path, self.strict)

        if issubclass(type, (dict, tuple)):
            return value

        hints = _attributes(type)
        if len(hints) > 0:
            specs = list()
            for attribute, hint in hints.items():
                required = not hasattr(type, attribute)
                specs.append((attribute, self.naming(attribute), hint, required))

            return self.fields(value, specs, path, self.strict)

        return value


    def fields(self, value, specs, path, strict):
        """ Prepare the document of an object type. Each of the *specs* is a
            (key, wire name, type, required) tuple: the document key is
            looked up by its wire name and the prepared value is stored
            under the key msgspec expects.
        """

        if not isinstance(value, dict):
            return value

        if strict:
            known = set(spec[1] for spec in specs)
            for key in value:
                if key not in known:
                    raise DeserializationError('unknown field %r - at `%s`' % (key, path))

        prepared = dict()

        for key, name, field_type, required in specs:
            item = value.get(name)

            if item is not None or (name in value and _nullable(field_type)):
                prepared[key] = self.prepare(item, field_type, '%s.%s' % (path, name))
            elif required:
                prepared[key] = zero(field_type)

        return prepared


    def sequence(self, value, origin, arguments, path):

        if not isinstance(value, (list, tuple)):
            return value

        if origin is tuple and len(arguments) > 0 and arguments[-1] is not Ellipsis:
            if len(arguments) != len(value):
                return value
            return [self.prepare(item, argument, '%s[%d]' % (path, index))
                    for index, (item, argument) in enumerate(zip(value, arguments))]

        if len(arguments) > 0:
            element = arguments[0]
        else:
            element = Any

        return [self.prepare(item, element, '%s[%d]' % (path, index))
                for index, item in enumerate(value)]


    def union(self, value, arguments, path):
        """ Prepare *value* for the member of the union it most resembles:
            an object type for a document, a collection for an array, and
            an integer for an integral float when no float is allowed.
        """

        members = [argument for argument in arguments if argument is not _NoneType]
        kind = _kind(value)

        for member in members:
            if kind is not None and _accepts(member) == kind:
                return self.prepare(value, member, path)

        if isinstance(value, float):
            bases = [_base(member) for member in members]
            if float not in bases and int in bases:
                return self.prepare(value, int, path)

        return value


# end of class _Context



def _base(type):

    while typing.get_origin(type) is Annotated:
        type = typing.get_args(type)[0]

    origin = typing.get_origin(type)
    if origin is not None:
        return origin

    return type



def _nullable(type):

    while typing.get_origin(type) is Annotated:
        type = typing.get_args(type)[0]

    if type is Any or type is object or type is None or type is _NoneType:
        return True

    origin = typing.get_origin(type)
    if origin is typing.Union or origin is types.UnionType:
        return _NoneType in typing.get_args(type)

    return False



def _kind(value):

    if isinstance(value, dict):
        return 'object'
    if isinstance(value, (list, tuple)):
        return 'array'
    return None



def _accepts(type):
    """ Whether *type* is read from an 'object' or an 'array' document, if
        either.
    """

    base = _base(type)

    if base in _mappings:
        return 'object'
    if base in _sequences:
        return 'array'

    if not isinstance(base, builtins_type) or issubclass(base, (str, bytes, enum.Enum)):
        return None

    if issubclass(base, msgspec.Struct) or dataclasses.is_dataclass(base):
        return 'object'
    if len(_attributes(base)) > 0:
        return 'object'

    return None



def _member(value, type):
    """ Return the value of the *type* member named *value*, for documents
        that spell an enum by name rather than by value.
    """

    if not isinstance(value, str):
        return value

    for member in type:
        if member.value == value:
            return value

    member = type.__members__.get(value)
    if member is None:
        return value

    return member.value



def _attributes(type):
    """ The annotated attributes of *type*, class variables excluded.
    """

    try:
        hints = typing.get_type_hints(type, include_extras=True)
    except (NameError, TypeError):
        hints = getattr(type, '__annotations__', dict())

    return dict((name, hint) for name, hint in hints.items()
                if typing.get_origin(hint) is not typing.ClassVar)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
