# a waf tool to run configure checks listed in an INI file
#
#   def options(opt):
#       opt.load('wafini.ini_autoconf')
#
#   def configure(conf):
#       conf.load('compiler_c wafini.ini_autoconf')
#       conf.CHECK_INI('config.ini').write_config_h('config.h')

from waflib import Logs, Options
from waflib.Configure import conf
from wafini.ini_checks import WafChecks
from wafini.ini_dispatch import IniDispatcher

option_groups = {}


def option_group(opt, name):
    '''find or create an option group'''
    if name in option_groups:
        return option_groups[name]
    gr = opt.add_option_group(name)
    option_groups[name] = gr
    return gr


def options(opt):
    gr = option_group(opt, 'INI configure options')
    gr.add_option('--autoconf-ini',
                  help='INI file listing the configure checks to run',
                  action='store', dest='autoconf_ini', default=None)


@conf
def CHECK_INI(conf, path=None):
    '''run the checks of an INI file, return the dispatcher

    path defaults to the --autoconf-ini option
    '''
    if path is None:
        path = getattr(Options.options, 'autoconf_ini', None)
    Logs.debug('ini: running checks from %s' % path)
    return IniDispatcher(WafChecks(conf)).run(path)


@conf
def INI_CONFIG_H(conf, path='config.h'):
    '''write out the config header holding the INI check results'''
    WafChecks(conf).write_config_h(path)


def configure(conf):
    if getattr(Options.options, 'autoconf_ini', None):
        conf.CHECK_INI()
