"""
Toast-style flash messages
"""
from flask import flash


def toast(title, description=None, variant='success'):
    """Queue a one-shot message for the next rendered page

    variant is 'success' or 'destructive'.
    """
    flash({'title': title, 'description': description}, variant)


def error_toast(title, error=None, fallback=None):
    """Queue a destructive message, preferring the backend's own wording"""
    description = getattr(error, 'message', None) or fallback
    toast(title, description, 'destructive')
