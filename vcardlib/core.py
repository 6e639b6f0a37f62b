import logging
import re

from vcardlib.codec import PRIMARY_CODEC, SECONDARY_CODEC, SAMPLE_SIZE, decode_bytes
from vcardlib.text import escape, unescape, split_structured_value, split_lines, is_continuation, fold


logger = logging.getLogger(__name__)

VERSION_21 = '2.1'
VERSION_30 = '3.0'
SUPPORTED_VERSIONS = (VERSION_21, VERSION_30)
DEFAULT_VERSION = VERSION_21

BEGIN_TOKEN = 'BEGIN:VCARD'
END_TOKEN = 'END:VCARD'
END_LINE_TOKEN = '\r\n'
VERSION = 'VERSION'

VALUE_SEPARATOR = ','
STRUCTURED_SEPARATOR = ';'

# properties whose values are positional sub-fields
STRUCTURED_PROPERTIES = frozenset({'N', 'ADR', 'ORG'})

_quoted_printable_pattern = re.compile(r'^[^:]*;\s*(?:ENCODING\s*=\s*)?QUOTED-PRINTABLE\s*[;:]', re.IGNORECASE)


def _index_unquoted(string, char, start=0):
    index = start
    stop = len(string)
    quoted = False

    while index < stop:
        current = string[index]

        if current == '\\' and not quoted:
            index += 2
            continue

        if current == '"':
            quoted = not quoted
        elif current == char and not quoted:
            return index

        index += 1

    raise ValueError(f'Not found any unquoted {char!r}')


def _split_unquoted(string, char):
    parts = []
    start = 0

    while True:
        try:
            index = _index_unquoted(string, char, start)
        except ValueError:
            parts.append(string[start:])
            return parts

        parts.append(string[start:index])
        start = index + 1


class PropertyParameter:
    __slots__ = ('_name', '_value')

    def __init__(self, name, value=''):
        self._name = name.strip().upper()
        self._value = value

    @property
    def name(self):
        return self._name

    @property
    def value(self):
        return self._value

    def encode(self):
        value = self._value

        if not value:
            return self._name

        if value != value.strip() or any(char in value for char in ';:,'):
            value = f'"{value}"'

        return f'{self._name}={value}'

    @classmethod
    def decode(cls, token):
        try:
            index = _index_unquoted(token, '=')
        except ValueError:
            return cls(token)

        value = token[index + 1:].strip()

        if len(value) >= 2 and value[0] == value[-1] == '"':
            value = value[1:-1]

        return cls(token[:index], value)

    def __eq__(self, other):
        if not isinstance(other, PropertyParameter):
            return NotImplemented

        return self.name == other.name and self.value == other.value

    def __hash__(self):
        return hash((self.name, self.value))

    def __repr__(self):
        return f'PropertyParameter({self.name!r}, {self.value!r})'


class Property:
    """One named field of a card with its parameters and values.

    Names are stored upper-cased. An empty name marks the "not found"
    sentinel returned by card lookups.
    """

    def __init__(self, name='', values=(), parameters=()):
        if isinstance(values, str):
            values = (values,)

        self.name = name.strip().upper()
        self.values = tuple(values)
        self.parameters = tuple(parameters)

    @property
    def value(self):
        return self.values[0] if self.values else ''

    @property
    def separator(self):
        if self.name.rpartition('.')[2] in STRUCTURED_PROPERTIES:
            return STRUCTURED_SEPARATOR

        return VALUE_SEPARATOR

    def parameter(self, name):
        name = name.strip().upper()
        return [param.value for param in self.parameters if param.name == name]

    def is_valid(self):
        return bool(self.name)

    __bool__ = is_valid

    def to_line(self):
        chunks = [self.name]

        for param in self.parameters:
            chunks.append(param.encode())

        value = self.separator.join(escape(value) for value in self.values)
        return f'{";".join(chunks)}:{value}'

    def encode(self, version=DEFAULT_VERSION):
        if version not in SUPPORTED_VERSIONS:
            logger.warning(f'unsupported vcard version: {version!r}')
            return b''

        return self.to_line().encode('utf-8')

    @classmethod
    def decode(cls, line):
        try:
            delimiter_index = _index_unquoted(line, ':')
        except ValueError:
            logger.debug(f'skipping line without value delimiter: {line!r}')
            return []

        name, *parameters_data = _split_unquoted(line[:delimiter_index], ';')
        prop = cls(name)

        if not prop.name:
            logger.debug(f'skipping line without property name: {line!r}')
            return []

        if prop.name == VERSION:
            return []

        prop.parameters = tuple(PropertyParameter.decode(token) for token in parameters_data if token.strip())

        values = split_structured_value(line[delimiter_index + 1:], prop.separator)
        prop.values = tuple(unescape(value) for value in values) or ('',)

        return [prop]

    def __eq__(self, other):
        if not isinstance(other, Property):
            return NotImplemented

        return (self.name, self.parameters, self.values) == (other.name, other.parameters, other.values)

    def __repr__(self):
        return f'Property({self.name!r}, {list(self.values)!r}, {list(self.parameters)!r})'


def _parameters_match(wanted, current, strict):
    if strict:
        return wanted == current

    return all(param in current for param in wanted)


class Card:
    def __init__(self, properties=()):
        self._properties = []

        if isinstance(properties, Card):
            properties = properties.properties()

        self.add_properties(properties)

    def add_property(self, prop):
        # the version line is written by encode
        if prop.name == VERSION:
            logger.debug(f'ignoring {VERSION} property, use the encode version instead')
            return

        for index, current in enumerate(self._properties):
            if current.name == prop.name and current.parameters == prop.parameters:
                self._properties[index] = prop
                return

        self._properties.append(prop)

    def add_properties(self, properties):
        for prop in properties:
            self.add_property(prop)

    def remove_properties(self, name):
        name = name.strip().upper()

        for index in range(len(self._properties) - 1, -1, -1):
            if self._properties[index].name == name:
                del self._properties[index]

    def _find(self, name, params, strict):
        name = name.strip().upper()
        params = tuple(params)

        for current in self._properties:
            if current.name == name and _parameters_match(params, current.parameters, strict):
                return current

        return None

    def property(self, name, params=(), strict=False):
        found = self._find(name, params, strict)
        return found if found is not None else Property()

    def properties(self, name=None):
        if name is None:
            return list(self._properties)

        name = name.strip().upper()
        values = []

        for current in self._properties:
            if current.name == name:
                values.extend(current.values)

        return Property(name, values) if values else Property()

    def contains(self, name, params=(), strict=False):
        if isinstance(name, Property):
            return name in self._properties

        return self._find(name, params, strict) is not None

    def is_valid(self):
        if not self._properties:
            return False

        return all(prop.is_valid() for prop in self._properties)

    def count(self):
        return len(self._properties)

    def encode(self, version=DEFAULT_VERSION, fold_width=None):
        if version not in SUPPORTED_VERSIONS:
            logger.warning(f'unsupported vcard version: {version!r}')
            return b''

        lines = [BEGIN_TOKEN, Property(VERSION, version).to_line()]

        for prop in self.properties():
            line = prop.to_line()

            if fold_width:
                line = fold(line, width=fold_width, newline=END_LINE_TOKEN)

            lines.append(line)

        lines.append(END_TOKEN)

        return END_LINE_TOKEN.join(lines).encode('utf-8')

    def __contains__(self, prop):
        return self.contains(prop)

    def __iter__(self):
        return iter(self._properties)

    def __len__(self):
        return len(self._properties)

    def __eq__(self, other):
        if not isinstance(other, Card):
            return NotImplemented

        return self._properties == other._properties

    def __repr__(self):
        return f'Card({self._properties!r})'


class TextReader:
    def __init__(self, lines):
        self.lines = iter(lines)
        self.line_number = 0

        self._next_line = None

    def readline(self):
        if self._next_line is None:
            line = next(self.lines, None)
        else:
            line = self._next_line
            self._next_line = None

        if line is not None:
            self.line_number += 1

        return line

    def peekline(self):
        if self._next_line is None:
            self._next_line = next(self.lines, None)

        return self._next_line


def _soft_line_break(line, next_line):
    if not line.rstrip().endswith('=') or next_line.strip().upper() == END_TOKEN:
        return False

    return _quoted_printable_pattern.match(line) is not None


def read_logical_line(reader):
    while True:
        line = reader.readline()

        if line is None:
            return

        # trailing whitespace belongs to the value
        line = line.lstrip()

        if line.strip():
            break

    while True:
        next_line = reader.peekline()

        if next_line is None:
            break

        if is_continuation(next_line):
            line += reader.readline().lstrip()
        elif _soft_line_break(line, next_line):
            line = line.rstrip()[:-1] + reader.readline().lstrip()
        else:
            break

    return line


def read_vcards(reader):
    vcards = []
    vcard = None

    while True:
        line = read_logical_line(reader)

        if line is None:
            break

        token = line.strip().upper()

        if vcard is None:
            if token == BEGIN_TOKEN:
                vcard = Card()
            else:
                logger.debug(f'discarding line {reader.line_number} outside of a vcard')
        elif token == END_TOKEN:
            vcards.append(vcard)
            vcard = None
        else:
            vcard.add_properties(Property.decode(line))

    if vcard is not None:
        logger.debug(f'dropping unterminated vcard at line {reader.line_number}')

    return vcards


def decode(data, primary=PRIMARY_CODEC, secondary=SECONDARY_CODEC, sample_size=SAMPLE_SIZE):
    if isinstance(data, (bytes, bytearray)):
        data = decode_bytes(data, primary, secondary, sample_size)

    if data.startswith('\ufeff'):
        data = data[1:]

    return read_vcards(TextReader(split_lines(data)))


def encode(vcards, version=DEFAULT_VERSION, fold_width=None):
    if version not in SUPPORTED_VERSIONS:
        logger.warning(f'unsupported vcard version: {version!r}')
        return b''

    terminator = END_LINE_TOKEN.encode('utf-8')
    return b''.join(vcard.encode(version, fold_width) + terminator for vcard in vcards)
