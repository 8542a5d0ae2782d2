"""Predefined character sets for ASCII art conversion."""

import unicodedata

from gifascii.errors import CharsetError

MIN_CHARSET_LENGTH = 2
MAX_CHARSET_LENGTH = 256
FILE_WHITESPACE = ('\n', '\t')

CHAR_SETS = {
    'simple': {
        'chars': " .:-=+*#%@",
        'name': 'Simple ASCII'
    },
    'detailed': {
        'chars': " .'`^\",:;Il!i><~+_-?][}{1)(|\\/tfjrxnuvczXYUJCLQ0OZmwqpdbkhao*#MW&8%B@",
        'name': 'Detailed ASCII'
    },
    'standard2': {
        'chars': " ?=#&0%@",
        'name': 'Standard2 ASCII'
    },
    'standard3': {
        'chars': " ';-~|}/+=",
        'name': 'Standard3 ASCII'
    },
    'standard4': {
        'chars': " _*!~)(+^#&$%@",
        'name': 'Standard4 ASCII'
    },
    'standard5': {
        'chars': " `-~+#@",
        'name': 'Standard5 ASCII'
    },
    'standard6': {
        'chars': " ¨'³•µðEÆ",
        'name': 'Standard6 ASCII'
    },
    'standard7': {
        'chars': " `.,-:~;+*#%$@",
        'name': 'Standard7 ASCII'
    },
    'standard_alt': {
        'chars': " .,:ilwW",
        'name': 'Standard ASCII Alternative'
    },
    'complex': {
        'chars': " `.',:^\";*!²¤/r(?+¿cLª7t1fJCÝy¢zF3±%S2kñ5AZXG$À0Ãm&Q8#RÔßÊNBåMÆØ@¶",
        'name': 'Complex ASCII '
    },
    'complex_alt': {
        'chars': " `.-':_,^=;><+!rc*/z?sLTv)J7(|Fi{C}fI31tlu[neoZ5Yxjya]2ESwqkP6h9d4VpOGbUAKXHm8RD#$Bg0MNWQ%&@",
        'name': 'Complex ASCII Alternative'
    },
    'fine': {
        'chars': " `^\",:;Il!i~+_-?][}{1)(|\\/tfjrxnuvczXYUJCLQ0OZmwqpdbkhao*#MW&8%B@$",
        'name': 'Fine Detail ASCII'
    },
    'runic': {
        'chars': " ᛫ᛌᚲ᛬ᛍᛵᛁᛊᚿᚽᚳᚪᚮᚩᚰᚨᛏᚠᚬᚧᛪᚫᚷᛱᚱᚢᛒᚤᛄᚣᚻᛖᛰᚸᚥᛞᛤᛥ",
        'name': 'Runic'
    },
    'box': {
        'chars': " ╶╴┈┄╌─┊╺┆└╸╭╰┉┬│╾┅┍┕┭━╘┎╱╲┖┰┯┋┸┇┞┗╙┱╧╀┹┢┡┳╅┻╃┃╚┠╈╇╳╂╦┣╩╉║╋╫╠╬",
        'name': 'Box Drawings'
    },
    'blocks': {
        'chars': " ▏▎▍▌▋▊▉█",
        'name': 'Block Elements '
    },
    'blocks_alt': {
        'chars': " ▏▁░▂▖▃▍▐▒▀▞▚▌▅▆▊▓▇▉█",
        'name': 'Block Elements Alternative'
    },
    'geo': {
        'chars': " ◜◞◟◦◃◠▿▹▱◌▵◅▭▸◁△◹▽▫▷▯□◯◄▰◫◊◮◎◈◖◭◗▬◤▪▼◑◍▮◒◐▤◉▧▨◕◛◚▣▦●▩■◘◙",
        'name': 'Geometric Shapes'
    },
    'shades': {
        'chars': " ░▒▓█",
        'name': 'Shaded Blocks'
    },
    'shades_mix': {
        'chars': " .░▒▓█",
        'name': 'Mixed Shaded Blocks'
    },
}

DEFAULT_CHAR_SET = 'detailed'
SIMPLE_CHAR_SET = 'simple'


class CharacterSet:
    """Ordered, validated characters from darkest to lightest.

    Tab and newline are only accepted when ``from_file`` is set, since a
    charset file is the one place they can be written down on purpose.
    """

    __slots__ = ('_chars', 'name')

    def __init__(self, chars, name=None, from_file=False):
        if not isinstance(chars, str):
            raise CharsetError(chars, "must be a string")
        if not MIN_CHARSET_LENGTH <= len(chars) <= MAX_CHARSET_LENGTH:
            raise CharsetError(
                chars,
                f"length {len(chars)} outside {MIN_CHARSET_LENGTH}-{MAX_CHARSET_LENGTH}",
            )
        seen = set()
        for char in chars:
            if char in seen:
                raise CharsetError(chars, f"duplicate character {char!r}")
            seen.add(char)
            if unicodedata.category(char) == 'Cc':
                if not (from_file and char in FILE_WHITESPACE):
                    raise CharsetError(chars, f"control character {char!r}")
        object.__setattr__(self, '_chars', chars)
        object.__setattr__(self, 'name', name)

    def __setattr__(self, key, value):
        raise AttributeError("CharacterSet is immutable")

    @classmethod
    def builtin(cls, key):
        try:
            entry = CHAR_SETS[key]
        except KeyError:
            raise CharsetError(key, f"unknown character set, choose from {', '.join(CHAR_SETS)}") from None
        return cls(entry['chars'], name=key)

    @classmethod
    def from_file_content(cls, content, name=None):
        # a single trailing newline is the file terminator, not a character
        if content.endswith('\n'):
            content = content[:-1]
        return cls(content, name=name, from_file=True)

    @property
    def chars(self):
        return self._chars

    def __len__(self):
        return len(self._chars)

    def __getitem__(self, index):
        return self._chars[index]

    def __iter__(self):
        return iter(self._chars)

    def __eq__(self, other):
        return isinstance(other, CharacterSet) and other._chars == self._chars

    def __hash__(self):
        return hash(self._chars)

    def __repr__(self):
        return f"CharacterSet({self._chars!r})"


def get_char_set(name=None):
    return CharacterSet.builtin(name or DEFAULT_CHAR_SET)
