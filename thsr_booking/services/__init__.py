"""
Services of the booking site
"""
from thsr_booking.services.thsrc import THSRC

__all__ = ['THSRC']
