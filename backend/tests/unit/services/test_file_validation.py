"""
Unit Tests for upload validation
"""
import pytest

from app.core.config import settings
from app.services.file_validation import (
    format_file_size,
    is_supported_type,
    validate_file,
    validate_file_list,
)

MB = 1024 * 1024


class TestFormatFileSize:

    @pytest.mark.parametrize('size, expected', [
        (0, '0 B'),
        (512, '512.0 B'),
        (1024, '1.0 KB'),
        (1536, '1.5 KB'),
        (25 * MB, '25.0 MB'),
    ])
    def test_format(self, size, expected):
        assert format_file_size(size) == expected


class TestSupportedTypes:

    def test_known_types(self):
        assert is_supported_type('application/pdf')
        assert is_supported_type('text/csv; charset=utf-8')
        assert is_supported_type('IMAGE/PNG')

    def test_unknown_types(self):
        assert not is_supported_type('application/x-msdownload')
        assert not is_supported_type(None)
        assert not is_supported_type('')


class TestValidateFile:

    def test_accepts_normal_file(self):
        assert validate_file('deck-notes.pdf', 2 * MB) is None

    def test_empty_file(self):
        error = validate_file('empty.txt', 0)

        assert error.code == 'EMPTY_FILE'
        assert error.details['file_name'] == 'empty.txt'

    def test_too_large(self):
        error = validate_file('video.mov', settings.MAX_FILE_SIZE + 1)

        assert error.code == 'SIZE_EXCEEDED'
        assert 'exceeds 25 MB limit' in error.message

    def test_custom_limit(self):
        assert validate_file('a.csv', 2 * MB, max_size=MB).code == 'SIZE_EXCEEDED'
        assert validate_file('a.csv', MB, max_size=MB) is None


class TestValidateFileList:

    def test_collects_per_file_errors(self):
        errors = validate_file_list([('ok.pdf', 100), ('empty.txt', 0), ('big.zip', settings.MAX_FILE_SIZE * 2)], 0)

        assert [e.code for e in errors] == ['EMPTY_FILE', 'SIZE_EXCEEDED']

    def test_too_many_files_short_circuits(self):
        errors = validate_file_list([('a.pdf', 0), ('b.pdf', 10)], current_file_count=settings.MAX_FILES_PER_SESSION - 1)

        assert len(errors) == 1
        assert errors[0].code == 'TOO_MANY_FILES'
        assert errors[0].details['file_name'] == 'Multiple files'

    def test_exactly_at_limit_is_allowed(self):
        assert validate_file_list([('a.pdf', 10)], current_file_count=2, max_files=3) == []
