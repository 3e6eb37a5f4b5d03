# the checks an INI file can ask for, run through a waf
# ConfigurationContext
#
# Every check compiles (or links) a small fragment. The fragment starts
# with the prologue handed over by the caller, which holds the #include
# lines of the headers found so far.

import os
from waflib import Errors, Logs
from wafini.ini_utils import TO_LIST, define_key, split_member

SNIP_HEADER = '''%(prologue)s
#include <%(header)s>
int main(void) { return 0; }
'''

# this is based on the autoconf strategy
SNIP_FUNCTION = '''#define %(f)s __fake__%(f)s
%(prologue)s
#ifdef HAVE_LIMITS_H
# include <limits.h>
#else
# include <assert.h>
#endif
#undef %(f)s
#ifdef __cplusplus
extern "C"
#endif
char %(f)s(void);
#if defined __stub_%(f)s || defined __stub___%(f)s
#error "bad glibc stub"
#endif
int main(void) { return %(f)s(); }
'''

SNIP_DECL = '''%(prologue)s
int main(void) {
#ifndef %(decl)s
    (void) %(decl)s;
#endif
    return 0;
}
'''

SNIP_TYPE = '''%(prologue)s
int main(void) {
    if ((%(type)s *) 0) return 0;
    if (sizeof (%(type)s)) return 0;
    return 1;
}
'''

SNIP_MEMBER = '''%(prologue)s
int main(void) {
    static %(aggr)s s;
    void *_x; _x = (void *)&s.%(member)s;
    return _x == 0;
}
'''

# fails to compile unless (expr) <= bound
SNIP_BOUND = '''%(prologue)s
#include <stddef.h>
int main(void) {
    static int test_array[1 - 2 * !(((long int)(%(expr)s)) <= %(bound)d)];
    test_array[0] = 0;
    return test_array[0];
}
'''

SNIP_STDC = '''#include <stdlib.h>
#include <stdarg.h>
#include <string.h>
#include <float.h>
int main(void) { return 0; }
'''

SNIP_DIRENT = '''%(prologue)s
#include <sys/types.h>
#include <%(header)s>
int main(void) { if ((DIR *) 0) return 0; return 0; }
'''

STDC_HEADERS = ['stdlib.h', 'stdarg.h', 'string.h', 'float.h']
DEFAULT_HEADERS = ['sys/types.h', 'sys/stat.h', 'memory.h', 'strings.h',
                   'inttypes.h', 'stdint.h', 'unistd.h']
DIRENT_HEADERS = ['dirent.h', 'sys/ndir.h', 'sys/dir.h', 'ndir.h']

# largest size or alignment we try to find
MAX_BOUND = 1 << 16


def type_expression(name):
    '''the C type of "struct tm.tm_year" is the type of the member'''
    aggr, member = split_member(name)
    if member is None:
        return aggr
    return '__typeof__(((%s *) 0)->%s)' % (aggr, member)


class WafChecks(object):
    '''a capability provider for wafini.ini_dispatch, on top of a waf
    ConfigurationContext'''

    def __init__(self, conf):
        self.conf = conf

    def __repr__(self):
        return '<%s on %r>' % (self.__class__.__name__, self.conf)

    @property
    def env(self):
        return self.conf.env

    ####################################################
    # messages and defines

    def msg_checking(self, msg):
        self.conf.start_msg('Checking for %s' % msg)

    def msg_result(self, result):
        self.conf.end_msg(result, 'GREEN' if result == 'yes' else 'YELLOW')

    def define_var(self, name, value):
        '''define name in the config header to the result of a check'''
        Logs.debug('ini: define %s=%r' % (name, value))
        if value is None or value is False:
            self.conf.undefine(name)
        elif value is True:
            self.conf.define(name, 1)
        elif isinstance(value, int):
            self.conf.define(name, value, quote=False)
        else:
            self.conf.define(name, str(value))

    def write_config_h(self, path='config.h'):
        self.conf.write_config_header(path, remove=False)

    ####################################################
    # setup

    def push_includes(self, dirs):
        self.env.append_unique('INCLUDES', TO_LIST(dirs))
        return True

    def push_preprocess_flags(self, flags):
        self.env.append_value('CPPFLAGS', TO_LIST(flags))
        return True

    def push_compiler_flags(self, flags):
        self.env.append_value('CFLAGS', TO_LIST(flags))
        return True

    def push_link_flags(self, flags):
        self.env.append_value('LINKFLAGS', TO_LIST(flags))
        return True

    ####################################################
    # files and programs

    def check_file(self, path):
        '''check that a file exists and is readable'''
        return os.path.isfile(path) and os.access(path, os.R_OK)

    def _find(self, names, var=None):
        kw = {'mandatory': False}
        if var:
            kw['var'] = var
        ret = self.conf.find_program(names, **kw)
        if not ret:
            return None
        return ' '.join(TO_LIST(ret))

    def check_prog(self, prog):
        return self._find(prog)

    def check_prog_yacc(self, prog='yacc'):
        ret = self._find(['bison', 'byacc', 'yacc'], 'YACC')
        if ret and os.path.basename(TO_LIST(ret)[0]).startswith('bison') \
                and '-y' not in TO_LIST(ret):
            ret += ' -y'
            self.env.YACC = TO_LIST(ret)
        return ret

    def check_prog_awk(self, prog='awk'):
        return self._find(['gawk', 'mawk', 'nawk', 'awk'], 'AWK')

    def check_prog_egrep(self, prog='egrep'):
        '''prefer "grep -E" when grep understands it'''
        if self.conf.environ.get('EGREP'):
            return self._find('egrep', 'EGREP')
        grep = self._find('grep', 'GREP')
        if grep:
            cmd = TO_LIST(grep) + ['-E']
            try:
                self.conf.cmd_and_log(cmd + ['(a|b)'], input=b'a\n')
            except Errors.WafError:
                Logs.debug('ini: %s does not handle -E' % grep)
            else:
                self.env.EGREP = cmd
                return ' '.join(cmd)
        return self._find('egrep', 'EGREP')

    def check_prog_lex(self, prog='lex'):
        return self._find(['flex', 'lex'], 'LEX')

    def check_prog_sed(self, prog='sed'):
        return self._find(['gsed', 'sed'], 'SED')

    def check_prog_pkg_config(self, prog='pkg_config'):
        return self._find(['pkg-config', 'pkgconf'], 'PKG_CONFIG')

    def check_prog_cc(self, prog='cc'):
        '''the C compiler, the one waf already uses if it has one'''
        if self.env.CC:
            return ' '.join(TO_LIST(self.env.CC))
        return self._find(['cc', 'gcc', 'clang'], 'CC')

    ####################################################
    # compiler checks

    def _check_code(self, fragment, msg, link=False):
        if link:
            features = 'c cprogram'
        else:
            features = 'c'
        ret = self.conf.check(fragment=fragment,
                              features=features,
                              execute=False,
                              mandatory=False,
                              msg=msg)
        return bool(ret)

    def check_header(self, header, prologue='', action_on_true=None):
        '''check for a header, and define HAVE_xxx_H'''
        d = define_key('HAVE', header)
        ret = self._check_code(SNIP_HEADER % {'prologue': prologue,
                                              'header': header},
                               'Checking for header %s' % header)
        if ret:
            self.conf.define(d, 1)
            if action_on_true:
                action_on_true()
        else:
            self.conf.undefine(d)
        return ret

    def check_decl(self, decl, prologue=''):
        '''check for a declaration, HAVE_DECL_xxx is always defined'''
        ret = self._check_code(SNIP_DECL % {'prologue': prologue, 'decl': decl},
                               'Checking for declaration of %s' % decl)
        self.conf.define(define_key('HAVE_DECL', decl), int(ret), quote=False)
        return ret

    def check_func(self, f, prologue=''):
        '''check that a function links'''
        d = define_key('HAVE', f)
        ret = self._check_code(SNIP_FUNCTION % {'prologue': prologue, 'f': f},
                               'Checking for function %s' % f,
                               link=True)
        if ret:
            self.conf.define(d, 1)
        else:
            self.conf.undefine(d)
        return ret

    def check_type(self, t, prologue=''):
        '''check for a type'''
        d = define_key('HAVE', t)
        ret = self._check_code(SNIP_TYPE % {'prologue': prologue, 'type': t},
                               'Checking for type %s' % t)
        if ret:
            self.conf.define(d, 1)
        else:
            self.conf.undefine(d)
        return ret

    def check_member(self, name, prologue=''):
        '''check for an aggregate member, given as "struct tm.tm_year"'''
        aggr, member = split_member(name)
        if member is None:
            Logs.warn('ini: %r is not of the form "aggregate.member"' % name)
            return False
        d = define_key('HAVE', '%s_%s' % (aggr, member))
        ret = self._check_code(SNIP_MEMBER % {'prologue': prologue,
                                              'aggr': aggr,
                                              'member': member},
                               'Checking for member %s in %s' % (member, aggr))
        if ret:
            self.conf.define(d, 1)
        else:
            self.conf.undefine(d)
        return ret

    def _compute_bound(self, expr, prologue):
        '''find the value of a compile time constant expression,
        without running anything

        returns None if the expression does not compile or is out
        of range
        '''
        def le(bound):
            return self._check_code(SNIP_BOUND % {'prologue': prologue,
                                                  'expr': expr,
                                                  'bound': bound},
                                    'Checking if %s <= %d' % (expr, bound))
        if not le(MAX_BOUND):
            return None
        # 0 is a valid answer, gcc gives empty structs a size of 0
        hi = 0
        while not le(hi):
            hi = hi * 2 or 1
        lo = hi // 2 + 1
        while lo < hi:
            mid = (lo + hi) // 2
            if le(mid):
                hi = mid
            else:
                lo = mid + 1
        return hi

    def _check_value(self, prefix, expr, name, msg, prologue):
        d = define_key(prefix, name)
        self.conf.start_msg(msg)
        ret = self._compute_bound(expr, prologue)
        if ret is None:
            self.conf.undefine(d)
            self.conf.end_msg(False)
        else:
            self.conf.define(d, ret, quote=False)
            self.conf.end_msg(str(ret))
        return ret

    def check_sizeof_type(self, t, prologue=''):
        '''find the size of a type, define SIZEOF_xxx'''
        return self._check_value('SIZEOF',
                                 'sizeof(%s)' % type_expression(t),
                                 t, 'Checking size of %s' % t, prologue)

    def check_alignof_type(self, t, prologue=''):
        '''find the alignment of a type, define ALIGNOF_xxx'''
        return self._check_value('ALIGNOF',
                                 'offsetof(struct { char c; %s x; }, x)' % type_expression(t),
                                 t, 'Checking alignment of %s' % t, prologue)

    ####################################################
    # bundles

    def _check_headers(self, headers, prologue, action_on_header_true):
        ret = True
        for h in headers:
            if self.check_header(h, prologue=prologue):
                if action_on_header_true:
                    action_on_header_true(h)
            else:
                ret = False
        return ret

    def check_stdc_headers(self, prologue='', action_on_header_true=None):
        '''check for the ANSI C headers, define STDC_HEADERS'''
        self.conf.start_msg('Checking for ANSI C header files')
        ret = self._check_headers(STDC_HEADERS, prologue, action_on_header_true)
        if ret:
            ret = self._check_code(SNIP_STDC, 'Checking for ANSI C headers together')
        if ret:
            self.conf.define('STDC_HEADERS', 1)
        else:
            self.conf.undefine('STDC_HEADERS')
        self.conf.end_msg(ret)
        return ret

    def check_default_headers(self, prologue='', action_on_header_true=None):
        '''check for the headers autoconf includes by default'''
        ret = self.check_stdc_headers(prologue=prologue,
                                      action_on_header_true=action_on_header_true)
        self.conf.start_msg('Checking for default header files')
        if not self._check_headers(DEFAULT_HEADERS, prologue, action_on_header_true):
            ret = False
        self.conf.end_msg(ret)
        return ret

    def check_dirent_header(self, prologue='', action_on_header_true=None):
        '''check for the first header defining DIR'''
        self.conf.start_msg('Checking for header defining DIR')
        found = None
        for h in DIRENT_HEADERS:
            if self._check_code(SNIP_DIRENT % {'prologue': prologue, 'header': h},
                                'Checking for DIR in %s' % h):
                found = h
                break
        for h in DIRENT_HEADERS:
            if h == found:
                self.conf.define(define_key('HAVE', h), 1)
            else:
                self.conf.undefine(define_key('HAVE', h))
        if found and action_on_header_true:
            action_on_header_true(found)
        self.conf.end_msg(found or False)
        return found is not None
