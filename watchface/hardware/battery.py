"""
Battery - Charge level from the Linux power_supply class
"""
import logging
from pathlib import Path
from typing import Optional


logger = logging.getLogger(__name__)

POWER_SUPPLY_ROOT = Path('/sys/class/power_supply')


class BatteryMonitor:
    """
    Reads battery capacity from sysfs.
    Returns None on machines without a battery; the overlay is then hidden.
    """
    
    def __init__(self, capacity_path: str = '', power_supply_root: Path = POWER_SUPPLY_ROOT):
        """
        Initialize battery monitor.
        
        Args:
            capacity_path: Explicit capacity file, empty to auto-detect
            power_supply_root: Directory scanned during auto-detection
        """
        self._root = Path(power_supply_root)
        self._capacity_path: Optional[Path] = Path(capacity_path) if capacity_path else None
        self._detected = bool(capacity_path)
    
    def _detect(self) -> Optional[Path]:
        """Find the first supply whose type is Battery"""
        try:
            for supply in sorted(self._root.iterdir()):
                type_file = supply / 'type'
                capacity = supply / 'capacity'
                if type_file.exists() and capacity.exists():
                    if type_file.read_text().strip() == 'Battery':
                        logger.info(f"Battery detected: {supply.name}")
                        return capacity
        except OSError as e:
            logger.debug(f"Battery scan failed: {e}")
        return None
    
    def level(self) -> Optional[int]:
        """
        Current charge percentage.
        
        Returns:
            0-100, or None if no battery is readable
        """
        if not self._detected:
            self._capacity_path = self._detect()
            self._detected = True
        
        if self._capacity_path is None:
            return None
        
        try:
            value = int(self._capacity_path.read_text().strip())
        except (OSError, ValueError) as e:
            logger.debug(f"Battery read failed: {e}")
            return None
        
        return max(0, min(100, value))
