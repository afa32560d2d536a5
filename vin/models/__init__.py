"""
Models module for the VIN ID generator.
"""

from vin.models.config import Config, MAX_TOTAL_BITS
from vin.models.reservation import Reservation
