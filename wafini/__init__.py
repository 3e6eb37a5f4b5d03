'''drive waf configure checks from an INI file'''

__version__ = '0.1.0'
