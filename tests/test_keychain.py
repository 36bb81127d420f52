"""Tests for Keychain password lookup and focus restoration."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from utils.wifi.keychain import KeychainCredentialStore


def _completed(returncode: int = 0, stdout: str = '', stderr: str = '') -> MagicMock:
    result = MagicMock()
    result.returncode = returncode
    result.stdout = stdout
    result.stderr = stderr
    return result


class TestGetPassword:
    """Tests for KeychainCredentialStore.get_password."""

    def test_found(self):
        store = KeychainCredentialStore()

        with patch('utils.wifi.keychain.subprocess.run',
                   return_value=_completed(stdout='s3cret\n')) as mock_run:
            assert store.get_password('HomeNet') == 's3cret'

        assert mock_run.call_args[0][0] == [
            '/usr/bin/security', 'find-generic-password', '-wa', 'HomeNet'
        ]

    def test_not_found(self):
        store = KeychainCredentialStore()
        result = _completed(44, stderr='security: SecKeychainSearchCopyNext: The specified item could not be found')

        with patch('utils.wifi.keychain.subprocess.run', return_value=result):
            assert store.get_password('Nowhere') is None

    def test_empty_output(self):
        store = KeychainCredentialStore()

        with patch('utils.wifi.keychain.subprocess.run', return_value=_completed(stdout='\n')):
            assert store.get_password('HomeNet') is None

    def test_tool_missing(self):
        store = KeychainCredentialStore()

        with patch('utils.wifi.keychain.subprocess.run', side_effect=FileNotFoundError()):
            assert store.get_password('HomeNet') is None

    def test_ssid_passed_as_single_argument(self):
        store = KeychainCredentialStore()

        with patch('utils.wifi.keychain.subprocess.run',
                   return_value=_completed(stdout='pw')) as mock_run:
            store.get_password('My "Net"; rm')

        assert mock_run.call_args[0][0][-1] == 'My "Net"; rm'


class TestRestoreFocus:
    """Tests for re-activating the calling application."""

    def test_no_focus_app(self):
        store = KeychainCredentialStore(focus_app=None)

        with patch('utils.wifi.keychain.subprocess.run',
                   return_value=_completed(stdout='pw')) as mock_run:
            store.get_password('HomeNet')

        assert mock_run.call_count == 1

    def test_open_after_lookup(self):
        store = KeychainCredentialStore(focus_app='Terminal')

        with patch('utils.wifi.keychain.subprocess.run',
                   return_value=_completed(stdout='pw')) as mock_run:
            store.get_password('HomeNet')

        assert mock_run.call_count == 2
        assert mock_run.call_args_list[1][0][0] == ['open', '-a', 'Terminal']

    def test_restored_even_when_not_found(self):
        store = KeychainCredentialStore(focus_app='Terminal')
        results = [_completed(44), _completed(0)]

        with patch('utils.wifi.keychain.subprocess.run', side_effect=results) as mock_run:
            assert store.get_password('HomeNet') is None

        assert mock_run.call_args_list[1][0][0][0] == 'open'

    def test_osascript_fallback(self):
        store = KeychainCredentialStore(focus_app='Terminal')
        results = [_completed(1, stderr='Unable to find application')]

        with patch('utils.wifi.keychain.subprocess.run',
                   side_effect=results + [_completed(0)]) as mock_run:
            store.restore_focus()

        fallback = mock_run.call_args_list[1][0][0]
        assert fallback[0] == 'osascript'
        assert '"Terminal"' in fallback[2]

    def test_failures_are_swallowed(self):
        store = KeychainCredentialStore(focus_app='Terminal')

        with patch('utils.wifi.keychain.subprocess.run', side_effect=OSError('nope')) as mock_run:
            store.restore_focus()

        assert mock_run.call_count == 2

    def test_lookup_result_survives_focus_failure(self):
        store = KeychainCredentialStore(focus_app='Terminal')
        results = [_completed(stdout='s3cret'), OSError('nope'), OSError('nope')]

        with patch('utils.wifi.keychain.subprocess.run', side_effect=results):
            assert store.get_password('HomeNet') == 's3cret'
