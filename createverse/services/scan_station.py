# services/scan_station.py
"""
Scanner input surfaces.

A ScanStation is one physical input (a camera page, a USB barcode reader, a
manual entry box). It owns its debounce slot; separate stations are never
debounced against each other, the attendance index settles that.
"""

import logging
import threading
from collections import OrderedDict, namedtuple

from flask import current_app

from createverse.services.attendance_service import AttendanceService
from createverse.services.errors import ServiceError, ErrorCode
from createverse.services.store import StoreError
from createverse.utils.data_processing import sanitize_identifier
from createverse.utils.debounce import ScanDebouncer

logger = logging.getLogger('check_in')


class ScanStatus:
    CHECKED_IN = 'checked_in'
    ALREADY_CHECKED_IN = 'already_checked_in'
    NOT_FOUND = 'not_found'
    INVALID = 'invalid'
    ERROR = 'error'


_STATUS_BY_CODE = {
    ErrorCode.ALREADY_CHECKED_IN: ScanStatus.ALREADY_CHECKED_IN,
    ErrorCode.NOT_FOUND: ScanStatus.NOT_FOUND,
    ErrorCode.INVALID_INPUT: ScanStatus.INVALID,
}

ScanResult = namedtuple('ScanResult', ['status', 'identifier', 'member', 'record', 'error'])


class ScanStation:
    """Sanitize, debounce and check in values coming from one input surface."""

    def __init__(self, station_id='default', attendance_service=None, window_ms=None, min_length=None):
        self.station_id = station_id
        self.attendance = attendance_service or AttendanceService()
        if window_ms is None:
            window_ms = current_app.config.get('SCAN_DEBOUNCE_MS', 3000)
        if min_length is None:
            min_length = current_app.config.get('MIN_SCAN_LENGTH', 2)
        self.min_length = min_length
        self.debouncer = ScanDebouncer(window_ms=window_ms)
        self._lock = threading.Lock()

    def handle(self, raw_value, now=None):
        """
        Process one decoded value.

        Returns:
            ScanResult, or None when the value was dropped as a repeat trigger
        """
        identifier = sanitize_identifier(raw_value)
        if len(identifier) < self.min_length:
            return ScanResult(ScanStatus.INVALID, identifier, None, None,
                              'Invalid scan - no readable data detected')

        with self._lock:
            accepted = self.debouncer.should_process(identifier, now=now)
        if not accepted:
            logger.debug(f"Station {self.station_id}: dropped repeat scan of {identifier}")
            return None

        try:
            check_in = self.attendance.check_in(identifier)
        except ServiceError as e:
            return ScanResult(_STATUS_BY_CODE.get(e.code, ScanStatus.ERROR), identifier, None, None, e.message)
        except StoreError as e:
            logger.error(f"Station {self.station_id}: store error checking in {identifier}: {e}")
            return ScanResult(ScanStatus.ERROR, identifier, None, None, str(e))

        return ScanResult(ScanStatus.CHECKED_IN, identifier, check_in.member, check_in.record, None)


class StationRegistry:
    """
    One ScanStation per station id for the HTTP surface.

    Station ids come from the clients, so only the most recently used
    ``max_stations`` are kept; an evicted station starts with an empty
    debounce slot if it scans again.
    """

    def __init__(self, max_stations=64):
        self.max_stations = max_stations
        self._stations = OrderedDict()
        self._lock = threading.Lock()

    def get(self, station_id):
        with self._lock:
            station = self._stations.get(station_id)
            if station is None:
                station = ScanStation(station_id)
                self._stations[station_id] = station
                while len(self._stations) > self.max_stations:
                    evicted, _ = self._stations.popitem(last=False)
                    logger.info(f"Dropped idle scan station {evicted}")
            else:
                self._stations.move_to_end(station_id)
            return station

    def clear(self):
        with self._lock:
            self._stations.clear()

    def __contains__(self, station_id):
        return station_id in self._stations

    def __len__(self):
        return len(self._stations)
