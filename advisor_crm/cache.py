"""
Config cache for seed data.

Seed data (demo advisor and starter global policy templates) is read from
disk once and kept in memory for the lifetime of the process.
"""

import json
import os
from typing import Dict, Any, List, Optional
from threading import Lock

from advisor_crm.settings import SEED_FILE


class ConfigCache:
    """Thread-safe seed data cache."""

    def __init__(self, seed_file: str = SEED_FILE):
        self._seed_file = seed_file
        self._seed_data: Optional[Dict[str, Any]] = None
        self._lock = Lock()

    def get_seed_data(self) -> Dict[str, Any]:
        """Get cached seed data, loading from disk if not cached."""
        if self._seed_data is None:
            with self._lock:
                if self._seed_data is None:  # Double-check locking
                    if os.path.exists(self._seed_file):
                        with open(self._seed_file, 'r') as f:
                            self._seed_data = json.load(f)
                    else:
                        self._seed_data = {}
        return self._seed_data

    def get_advisors(self) -> List[Dict[str, Any]]:
        return self.get_seed_data().get("advisors", [])

    def get_global_policies(self) -> List[Dict[str, Any]]:
        return self.get_seed_data().get("global_policies", [])

    def clear_cache(self):
        """Clear cached data (useful for testing)."""
        with self._lock:
            self._seed_data = None


# Global cache instance
config_cache = ConfigCache()
