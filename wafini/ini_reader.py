# reading of the INI file that drives the configure checks

import configparser, os
from types import MappingProxyType

ROOT_SECTION = '_'


class IniParser(configparser.RawConfigParser):
    '''an INI parser that keeps keys as written

    "=" is the only delimiter so that keys like C:\\Windows\\Temp
    survive, a repeated key or section just updates the previous one.
    Only ";" starts a comment, at the start of a line or after
    whitespace.
    '''

    def __init__(self):
        super(IniParser, self).__init__(delimiters=('=',),
                                        comment_prefixes=(';',),
                                        inline_comment_prefixes=(';',),
                                        strict=False,
                                        empty_lines_in_values=False,
                                        interpolation=None,
                                        default_section='\0')

    def optionxform(self, optionstr):
        return optionstr.strip()


def parse_ini(text, source='<string>'):
    '''parse INI text into an ordered, read-only {section: {key: value}}

    entries before the first section header land in the "_" section,
    indented lines are entries of their own, never continuations
    '''
    lines = [line.lstrip() for line in text.splitlines()]
    parser = IniParser()
    parser.read_string('[%s]\n%s' % (ROOT_SECTION, '\n'.join(lines)),
                       source=source)

    ret = {}
    for section in parser.sections():
        items = dict(parser.items(section))
        if section == ROOT_SECTION and not items:
            continue
        ret[section] = MappingProxyType(items)
    return MappingProxyType(ret)


def read_ini(path):
    '''read an INI file, a missing file or a None path gives an empty document'''
    if path is None:
        return MappingProxyType({})
    if hasattr(path, 'read'):
        return parse_ini(path.read(), getattr(path, 'name', '<file>'))
    if not os.path.isfile(path):
        return MappingProxyType({})
    with open(path, 'r') as f:
        return parse_ini(f.read(), path)
