"""Modals shared by the TapWar cogs."""

from .admin_confirmation_modal import AdminConfirmationModal

__all__ = ['AdminConfirmationModal']
