# Copyright (c) 2025-2026 NASK. All rights reserved.

"""
Small generic helpers used throughout the *n6structmap* package.
"""


def ascii_str(obj):
    r"""
    Safely convert the given object to an ASCII-only `str`.

    Non-ASCII characters are escaped using Python literal notation;
    `bytes`-like objects are decoded as UTF-8 first (undecodable bytes
    are escaped as well). No encoding/decoding exception is raised.

    >>> ascii_str('')
    ''
    >>> ascii_str('Ech, ale błąd!')
    'Ech, ale b\\u0142\\u0105d!'
    >>> ascii_str(b'Ech, ale b\xc5\x82\xc4\x85d!')
    'Ech, ale b\\u0142\\u0105d!'
    >>> ascii_str(ValueError('spam'))
    'spam'
    >>> ascii_str(42)
    '42'
    """
    if isinstance(obj, (bytes, bytearray, memoryview)):
        obj = bytes(obj).decode('utf-8', 'surrogateescape')
    try:
        s = str(obj)
    except Exception:  # noqa
        s = repr(obj)
    return s.encode('ascii', 'backslashreplace').decode('ascii')


def type_name(obj_or_type):
    """
    Get the (ASCII-only) name of the given class or of the class of the
    given object -- the way type names appear in *n6structmap*'s error
    messages and unconverted-field names.

    >>> type_name(42)
    'int'
    >>> type_name(ValueError)
    'ValueError'
    >>> type_name(None)
    'NoneType'
    """
    cls = obj_or_type if isinstance(obj_or_type, type) else type(obj_or_type)
    return ascii_str(cls.__name__)


def attr_repr(*attr_names):
    """
    Make a __repr__() implementation based on given attribute names.

    Any number of positional args:
        Names of instance attributes and/or class attributes.

    Returns:
        A function being the requested __repr__() implementation.

    >>> class A(object):
    ...    __repr__ = attr_repr('x', 'y')
    ...    x = 1
    ...    def __init__(self):
    ...        self.y = 'qwerty'
    >>> a = A()
    >>> a
    <A x=1, y='qwerty'>
    """
    format_repr = ('<{0.__class__.__qualname__} ' +
                   ', '.join('%s={0.%s!r}' % (name, name)
                             for name in attr_names) +
                   '>').format
    format_repr_fallback = object.__repr__

    def __repr__(self):
        # noinspection PyBroadException
        try:
            return format_repr(self)
        except Exception:
            return format_repr_fallback(self)

    return __repr__
