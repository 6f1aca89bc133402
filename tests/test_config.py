import sys
import os
import importlib
import unittest
from unittest.mock import patch

class TestConfig(unittest.TestCase):
    def _reload(self):
        sys.modules.pop('auction_server.config', None)
        return importlib.import_module('auction_server.config')

    def tearDown(self):
        # leave a module built from the real environment behind
        self._reload()

    @patch.dict(os.environ, {'ROSTER_CAPACITY': '1'})
    def test_invalid_roster_capacity(self):
        with self.assertRaises(RuntimeError):
            self._reload()

        with patch.dict(os.environ, {'ROSTER_CAPACITY': '4'}):
            config = self._reload()
            self.assertEqual(config.AuctionConfig().roster_capacity, 4)

    @patch.dict(os.environ, {'FAILED_PASS_MODE': 'forever'})
    def test_invalid_failed_pass_mode(self):
        with self.assertRaises(RuntimeError):
            self._reload()

    @patch.dict(os.environ, {'BID_INCREMENT': '0'})
    def test_invalid_bid_increment(self):
        with self.assertRaises(RuntimeError):
            self._reload()

    @patch.dict(os.environ, {'CATEGORY_CAP': '0'})
    def test_invalid_category_cap(self):
        with self.assertRaises(RuntimeError):
            self._reload()

    @patch.dict(os.environ, {'ANTI_SNIPE_ALWAYS': '1', 'REOFFER_SECONDS': '45'})
    def test_environment_overrides(self):
        config = self._reload()
        self.assertTrue(config.AuctionConfig().anti_snipe_always)
        self.assertEqual(config.AuctionConfig().reoffer_seconds, 45)
