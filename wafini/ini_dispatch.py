# dispatch of INI sections to configure checks
#
# Each section of the INI file is mapped to one operation of a
# capability provider (see ini_checks.WafChecks). Entries are processed
# in a fixed section order, and in file order within a section, as
# later checks see the headers found by earlier ones.

from collections import namedtuple
from types import MappingProxyType
from waflib import Logs
from wafini.ini_reader import read_ini
from wafini.ini_utils import is_truthy, looks_numeric, hlist_to_string, unique_list

# argument styles
ARGS_KEY      = 'key'       # op(key)
ARGS_CHECK    = 'check'     # op(key, prologue=...)
ARGS_HEADER   = 'header'    # op(key, prologue=..., action_on_true=...)


class Section(namedtuple('Section', 'name stub_name stub_names args msg boolean_only')):
    '''one INI section and the operation it maps to'''

    def __new__(cls, name, stub_name, stub_names=None, args=ARGS_KEY, msg=None,
                boolean_only=False):
        if not name:
            raise ValueError('Internal error, section not set')
        if not stub_name:
            raise ValueError('Internal error, stub_name not set for %s' % name)
        return super(Section, cls).__new__(cls, name, stub_name,
                                           MappingProxyType(dict(stub_names or {})),
                                           args, msg,
                                           boolean_only)

    def stub_for(self, key):
        '''the operation name for a key of this section'''
        return self.stub_names.get(key, self.stub_name)


BUNDLE_STUB = '_check_bundle'
OUTPUT_STUB = 'write_config_h'

BUNDLES = {
    'stdc_headers'    : 'check_stdc_headers',
    'default_headers' : 'check_default_headers',
    'dirent_headers'  : 'check_dirent_header',
}

# the order of this table is the order of the checks
SECTIONS = (
    # setup
    Section('includes',         'push_includes',         boolean_only=True),
    Section('preprocess_flags', 'push_preprocess_flags', boolean_only=True),
    Section('compiler_flags',   'push_compiler_flags',   boolean_only=True),
    Section('link_flags',       'push_link_flags',       boolean_only=True),

    # checks
    Section('files',   'check_file', msg='file %s'),
    Section('progs',   'check_prog',
            stub_names={
                'yacc'       : 'check_prog_yacc',
                'awk'        : 'check_prog_awk',
                'egrep'      : 'check_prog_egrep',
                'lex'        : 'check_prog_lex',
                'sed'        : 'check_prog_sed',
                'pkg_config' : 'check_prog_pkg_config',
                'cc'         : 'check_prog_cc',
            }),
    Section('bundle',        BUNDLE_STUB,          boolean_only=True),
    Section('headers',       'check_header',       args=ARGS_HEADER),
    Section('decls',         'check_decl',         args=ARGS_CHECK),
    Section('funcs',         'check_func',         args=ARGS_CHECK),
    Section('types',         'check_type',         args=ARGS_CHECK),
    Section('sizeof_types',  'check_sizeof_type',  args=ARGS_CHECK),
    Section('alignof_types', 'check_alignof_type', args=ARGS_CHECK),
    Section('members',       'check_member',       args=ARGS_CHECK),

    # output, once all checks are done
    Section('outputs',       OUTPUT_STUB,          boolean_only=True),
)


class IniDispatcher(object):
    '''run the checks described by an INI file against a provider'''

    def __init__(self, provider):
        self.provider = provider
        self.sections = SECTIONS
        self._config_ini = None
        self._headers_ok = []

        # resolve every operation once
        self.stubs = {}
        names = set(BUNDLES.values())
        for section in self.sections:
            names.add(section.stub_name)
            names.update(section.stub_names.values())
        for name in sorted(names):
            if name == BUNDLE_STUB:
                self.stubs[name] = self._check_bundle
            else:
                self.stubs[name] = getattr(provider, name, None)

    @property
    def running(self):
        return self._config_ini is not None

    @property
    def headers_ok(self):
        '''headers found so far in this run, in discovery order'''
        return tuple(self._headers_ok)

    def run(self, config_ini=None):
        '''perform all the checks of the INI file config_ini'''
        self._headers_ok = []
        self._config_ini = read_ini(config_ini)
        try:
            for section in self.sections:
                self._process_from_config(section)
        finally:
            self._config_ini = None
            self._headers_ok = []
        return self

    def write_config_h(self, path='config.h'):
        '''write the config header, through the provider'''
        self.provider.write_config_h(path)
        return self

    def prologue(self):
        '''the #include lines of all the headers found so far'''
        return hlist_to_string(self._headers_ok)

    def _header_ok(self, *headers):
        self._headers_ok = unique_list(self._headers_ok + list(headers))

    def _args(self, section, key):
        if section.args == ARGS_KEY:
            return {}
        kw = {'prologue': self.prologue()}
        if section.args == ARGS_HEADER:
            kw['action_on_true'] = lambda: self._header_ok(key)
        return kw

    def _check_bundle(self, bundle):
        name = BUNDLES.get(bundle)
        if name is None:
            Logs.debug('ini: ignoring unknown bundle %s' % bundle)
            return None
        check = self.stubs.get(name)
        if check is None:
            Logs.warn("%r cannot %r" % (self.provider, name))
            return None
        return check(prologue=self.prologue(),
                     action_on_header_true=self._header_ok)

    def _process_from_config(self, section):
        entries = self._config_ini.get(section.name, {})

        for key, rhs in entries.items():
            if not is_truthy(rhs):
                continue

            stub_name = section.stub_for(key)
            stub = self.stubs.get(stub_name)
            if stub is None:
                Logs.warn("%r cannot %r" % (self.provider, stub_name))
                continue

            # an explicit implementation handles its own messages
            msg = section.msg if stub_name == section.stub_name else None

            Logs.debug('ini: [%s] %s = %s -> %s' % (section.name, key, rhs, stub_name))
            if msg:
                self.provider.msg_checking(msg % key)
            value = stub(key, **self._args(section, key))
            if not section.boolean_only and not looks_numeric(rhs):
                self.provider.define_var(rhs, value)
            if msg:
                self.provider.msg_result('yes' if value else 'no')
