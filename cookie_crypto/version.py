"""Cookie Crypto Meta information.
   Cookie Crypto signs and encrypts values into Rails-compatible cookie tokens.
"""
__title__ = 'cookie_crypto'
__description__ = (
   'Cookie Crypto signs and encrypts values into tokens compatible '
   'with Rails MessageVerifier and MessageEncryptor.'
)
__version__ = '0.1.0'
__license__ = 'Apache-2.0'
