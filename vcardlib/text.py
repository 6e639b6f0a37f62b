import re


DEFAULT_FOLD_WIDTH = 75

_newline_pattern = re.compile(r'\r\n|\r|\n')
_escape_pattern = re.compile(r'\\(.)', re.DOTALL)
_separation_patterns = {}

_escapes = {
    '\n': '\\n',
    '\\': '\\\\',
    ',': '\\,',
    ';': '\\;',
}

_unescapes = {
    '\\': '\\',
    ',': ',',
    ';': ';',
    'n': '\n',
    'N': '\n',
}


def _separation_pattern(separator):
    if len(separator) != 1:
        raise ValueError(f'separator must be a single character, got {separator!r}')

    pattern = _separation_patterns.get(separator)

    if pattern is None:
        char = re.escape(separator)
        pattern = re.compile(rf'(?:[^\\{char}]|\\\\|\\{char}|\\)*')
        _separation_patterns[separator] = pattern

    return pattern


def split_structured_value(string, separator):
    """Split on every occurrence of `separator` that is not backslash-escaped.

    The parts are returned still escaped. An empty string gives an empty list.
    """
    parts = []
    after_part = False

    for match in _separation_pattern(separator).finditer(string):
        if match.start() == len(string) and not parts:
            break

        if match.start() == match.end():
            # an empty match right after a part is just the separator
            if not after_part:
                parts.append('')

            after_part = False
        else:
            after_part = True
            parts.append(match.group())

    return parts


def escape(string):
    string = _newline_pattern.sub('\n', string)
    return ''.join(_escapes.get(char, char) for char in string)


def _unescape_match(match):
    char = match.group(1)
    return _unescapes.get(char, match.group(0))


def unescape(string):
    return _escape_pattern.sub(_unescape_match, string)


def split_lines(string):
    return _newline_pattern.split(string)


def is_continuation(line):
    return line[:1] in ('\t', ' ')


def _is_fold_point(string, index):
    return not (string[index - 1].isspace() or string[index].isspace())


def _find_fold_point(string, start, index, end):
    # Many readers trim continuation lines, so a fold must not touch
    # whitespace on either side.
    for candidate in range(index, start, -1):
        if _is_fold_point(string, candidate):
            return candidate

    for candidate in range(index + 1, end):
        if _is_fold_point(string, candidate):
            return candidate

    return end


def fold(string, *, width=DEFAULT_FOLD_WIDTH, newline='\r\n'):
    if width < 2:
        raise ValueError(f'fold width must be at least 2, got {width}')

    parts = []
    start = 0
    end = len(string)
    limit = width

    while end - start > limit:
        index = _find_fold_point(string, start, start + limit, end)

        if index == end:
            break

        if parts:
            parts.append(' ' + string[start:index])
        else:
            parts.append(string[start:index])

        start = index
        limit = width - 1

    if parts:
        parts.append(' ' + string[start:])
    else:
        parts.append(string[start:])

    return newline.join(parts)
