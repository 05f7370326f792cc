"""Data Vault Meta information.
   Data Vault tokenizes credit-card data and stores it encrypted.
"""
__title__ = 'data_vault'
__description__ = (
   'Data Vault is a modular, pragmatic, credit card tokenization vault '
   'backed by Redis or PostgreSQL.'
)
__version__ = '0.4.0'
__copyright__ = 'Copyright (c) 2023 Jesus Lara'
__author__ = 'Jesus Lara'
__author_email__ = 'jesuslarag@gmail.com'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/phenobarbital/data-vault'
