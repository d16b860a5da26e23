"""
Book Taiwan High Speed Rail tickets from the command line.
"""
from thsr_booking.configs.config import __version__, app_name

__all__ = ['__version__', 'app_name']
