# *-* coding: utf-8 *-*
__author__ = 'asicet contributors'
__license__ = 'MIT'
__version__ = '1.0.0'

__all__ = ['asice', 'xades', 'timestamp', 'extender', 'errors', 'config']
