'''wafini tests'''

import os
import re
import shutil
import tempfile
import unittest
from waflib import Errors, Logs
from waflib.ConfigSet import ConfigSet
from wafini.ini_utils import TO_LIST

# waf sets up its logger in its entry point
Logs.init_log()


class TestCase(unittest.TestCase):
    '''a wafini test case, with a private temporary directory'''

    def setUp(self):
        super(TestCase, self).setUp()
        self.tempdir = tempfile.mkdtemp(prefix='wafini-')
        self.addCleanup(shutil.rmtree, self.tempdir)

    def write_ini(self, text, name='config.ini'):
        path = os.path.join(self.tempdir, name)
        with open(path, 'w') as f:
            f.write(text)
        return path


class RecordingProvider(object):
    '''a capability provider that records every call

    results maps an operation name to its return value, or to a
    callable taking the key
    '''

    OPERATIONS = ['push_includes', 'push_preprocess_flags',
                  'push_compiler_flags', 'push_link_flags',
                  'check_file', 'check_prog',
                  'check_prog_yacc', 'check_prog_awk', 'check_prog_egrep',
                  'check_prog_lex', 'check_prog_sed', 'check_prog_pkg_config',
                  'check_prog_cc',
                  'check_header', 'check_decl', 'check_func', 'check_type',
                  'check_sizeof_type', 'check_alignof_type', 'check_member']

    def __init__(self, results=None, missing=()):
        self.results = dict(results or {})
        self.missing = set(missing)
        self.calls = []
        self.defines = []
        self.messages = []
        self.outputs = []
        self.bundle_headers = {}

    def __getattr__(self, name):
        if name in self.missing or name not in self.OPERATIONS:
            raise AttributeError(name)
        def op(key, **kw):
            self.calls.append((name, key, kw))
            ret = self.results.get(name, True)
            if callable(ret):
                ret = ret(key)
            if ret and 'action_on_true' in kw:
                kw['action_on_true']()
            return ret
        return op

    def _bundle(self, name, kw):
        self.calls.append((name, None, kw))
        for h in self.bundle_headers.get(name, []):
            kw['action_on_header_true'](h)
        return True

    def check_stdc_headers(self, **kw):
        return self._bundle('check_stdc_headers', kw)

    def check_default_headers(self, **kw):
        return self._bundle('check_default_headers', kw)

    def check_dirent_header(self, **kw):
        return self._bundle('check_dirent_header', kw)

    def define_var(self, name, value):
        self.defines.append((name, value))

    def msg_checking(self, msg):
        self.messages.append(('checking', msg))

    def msg_result(self, result):
        self.messages.append(('result', result))

    def write_config_h(self, path):
        self.outputs.append(path)

    def called(self):
        '''(operation, key) of every call, in order'''
        return [(name, key) for (name, key, kw) in self.calls]


BOUND_RE = re.compile(r'\(\(\(long int\)\((.*)\)\) <= (\d+)\)\]')


class FakeConf(object):
    '''enough of a waf ConfigurationContext for WafChecks

    answer(fragment) decides if a conf.check() succeeds, programs maps
    a program name to its path, values maps a C expression to its
    compile time value
    '''

    def __init__(self, answer=None, programs=None, values=None, grep_e=True):
        self.env = ConfigSet()
        self.environ = {}
        self.answer = answer or (lambda fragment: True)
        self.programs = dict(programs or {})
        self.values = dict(values or {})
        self.grep_e = grep_e
        self.checks = []
        self.commands = []
        self.searched = []
        self.msgs = []
        self.defines = {}
        self.headers = []

    def check(self, **kw):
        self.checks.append(kw)
        fragment = kw['fragment']
        m = BOUND_RE.search(fragment)
        if m:
            value = self.values.get(m.group(1))
            return value is not None and value <= int(m.group(2))
        return self.answer(fragment)

    def find_program(self, filename, **kw):
        names = TO_LIST(filename)
        self.searched.append((names, kw.get('var')))
        var = kw.get('var')
        if var and var in self.environ:
            ret = TO_LIST(self.environ[var])
        else:
            ret = None
            for name in names:
                if name in self.programs:
                    ret = [self.programs[name]]
                    break
        if ret and var:
            self.env[var] = ret
        return ret

    def cmd_and_log(self, cmd, **kw):
        self.commands.append((cmd, kw))
        if not self.grep_e:
            raise Errors.WafError('Command %r returned 2' % cmd)
        return 'a\n'

    def start_msg(self, msg, *k, **kw):
        self.msgs.append(('start', msg))

    def end_msg(self, result, *k, **kw):
        self.msgs.append(('end', result))

    def define(self, key, val, quote=True, comment=''):
        self.defines[key] = (val, quote)

    def undefine(self, key, comment=''):
        self.defines[key] = None

    def write_config_header(self, configfile='', remove=True, **kw):
        self.headers.append((configfile, remove))
