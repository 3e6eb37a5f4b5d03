# helpers shared by the INI driven configure checks

import re, shlex


NUMBER_RE = re.compile(r'''^\s*[+-]?
                           (?: (?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?
                             | inf(?:inity)?
                             | nan )
                           \s*$''', re.X | re.I)


def is_truthy(value):
    '''return True if a right-hand side value enables its entry

    only None, the empty string and "0" are false
    '''
    if value is None:
        return False
    return value != '' and value != '0'


def looks_numeric(value):
    '''return True if value is a string that reads as a number'''
    if not isinstance(value, str):
        return False
    return NUMBER_RE.match(value) is not None


def unique_list(seq):
    '''return a uniquified list in the same order as the existing list'''
    seen = set()
    result = []
    for item in seq:
        if item in seen: continue
        seen.add(item)
        result.append(item)
    return result


def TO_LIST(str, delimiter=None):
    '''Split a list, preserving quoted strings and existing lists'''
    if str is None:
        return []
    if isinstance(str, (list, tuple)):
        # we need to return a new independent list...
        return list(str)
    if len(str) == 0:
        return []
    lst = str.split(delimiter)
    # the string may have had quotes in it, now we
    # check if we did have quotes, and use the slower shlex
    # if we need to
    for e in lst:
        if e and e[0] == '"':
            return shlex.split(str)
    return lst


def define_key(prefix, name):
    '''form a define name like HAVE_SYS_TYPES_H from a prefix and a C name'''
    d = re.sub(r'[^A-Za-z0-9]', '_', name.strip()).upper()
    return '%s_%s' % (prefix, d)


def split_member(name):
    '''split "struct tm.tm_year" into ("struct tm", "tm_year")'''
    if '.' not in name:
        return (name, None)
    aggr, member = name.rsplit('.', 1)
    return (aggr.strip(), member.strip())


def hlist_to_string(headers):
    '''convert a headers list to a set of #include lines'''
    return "\n".join('#include <%s>' % h for h in headers)
