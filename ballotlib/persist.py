'''Serialization of election records to JSON-ready dictionaries.

Records (candidates, voters, events, the election configuration) are
decorated by :func:`simple_serialization`, which gives them a ``to_dict()``
method built from their constructor parameters. :func:`from_dict` reverses the
process. Only classes from the ``ballotlib`` package are ever instantiated
during deserialization.

Record fields may hold atomic values, lists, and dictionaries with string
keys, nested in any way.
'''

import sys
import inspect
import importlib
from typing import Any, Dict

from ballotlib.errors import InvalidInput


PACKAGE_NAME: str = 'ballotlib'

ATOMIC_TYPES = (str, int, float, bool, type(None))


def simple_serialization(class_: type) -> type:
    '''A decorator to provide a simple to_dict() serialization method.

    The resulting method will serialize all object attributes corresponding
    to the class's constructor parameter names. Therefore, this decorator
    is only useful when the class stores all its original parameters
    unchanged.

    :param class_: The class to add the method to.
    '''
    param_names = [
        name for name in inspect.signature(class_.__init__).parameters
        if name != 'self'
    ]

    def to_dict(self) -> Dict[str, Any]:
        out_dict = {'class': scoped_class_name(self)}
        for attr in param_names:
            out_dict[attr] = serialize_value(getattr(self, attr))
        return out_dict

    class_.to_dict = to_dict
    return class_


def serialize_value(value: Any) -> Any:
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    elif isinstance(value, ATOMIC_TYPES):
        return value
    elif isinstance(value, dict):
        if not all(isinstance(key, str) for key in value):
            raise ValueError(f'cannot serialize {value!r}: non-string keys')
        return {key: serialize_value(val) for key, val in value.items()}
    elif isinstance(value, list):
        return [serialize_value(val) for val in value]
    else:
        raise ValueError(f'cannot serialize {value!r} to dict format')


def deserialize_value(value: Any) -> Any:
    if isinstance(value, dict):
        if 'class' in value and is_scoped_identifier(value['class']):
            return deserialize_class(value)
        else:
            return {key: deserialize_value(val) for key, val in value.items()}
    elif isinstance(value, ATOMIC_TYPES):
        return value
    elif isinstance(value, list):
        return [deserialize_value(val) for val in value]
    else:
        raise ValueError(f'cannot deserialize {value!r}, type unknown')


def deserialize_class(clsdef: Dict[str, Any]) -> Any:
    cls = get_class(clsdef['class'])
    params = {
        key: deserialize_value(val)
        for key, val in clsdef.items() if key != 'class'
    }
    return cls(**params)


def get_class(identifier: str) -> type:
    if '.' not in identifier:
        raise ValueError(f'refusing to resolve builtin {identifier!r}')
    module, name = identifier.rsplit('.', 1)
    if module.split('.')[0] != PACKAGE_NAME:
        raise ValueError(f'refusing to resolve {identifier!r} outside'
                         f' the {PACKAGE_NAME} package')
    if module not in sys.modules:
        importlib.import_module(module)
    cls = getattr(sys.modules[module], name)
    if not hasattr(cls, 'to_dict'):
        raise ValueError(f'{identifier!r} is not a serializable record')
    return cls


def from_dict(value: Dict[str, Any]) -> Any:
    """Rebuild a ballotlib record from a JSON-like dictionary.

    :param value: A dictionary created by :func:`to_dict`.
    :raises InvalidInput: If the dictionary does not describe a record.
    """
    if not isinstance(value, dict):
        raise InvalidInput(value, 'a dict')
    elif 'class' not in value:
        raise InvalidInput(value, 'a dict with a class key')
    elif not is_scoped_identifier(value['class']):
        raise InvalidInput(value['class'], 'a scoped class name')
    try:
        return deserialize_value(value)
    except (ValueError, TypeError, AttributeError, ImportError) as e:
        raise InvalidInput(value['class'], f'a loadable record ({e})') from e


def to_dict(obj: Any) -> Dict[str, Any]:
    """Serialize a ballotlib record to a JSON-ready dictionary.

    :param obj: A record providing a `to_dict()` method (all records decorated
        by :func:`simple_serialization` have it).
    """
    return serialize_value(obj)


def is_scoped_identifier(value: Any):
    return (
        isinstance(value, str)
        and not value.startswith('.')
        and all(chunk.isidentifier() for chunk in value.split('.'))
    )


def scoped_class_name(value: Any):
    cls = value.__class__
    return '.'.join((cls.__module__, cls.__name__))
