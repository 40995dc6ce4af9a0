"""
Unit tests for FunctionLoader
"""

import pytest
import os

from reducer.function_loader import FunctionLoader


class TestFunctionLoaderBasics:
    """Tests for basic loading functionality"""

    def test_loads_valid_job_file(self, wordcount_job_file):
        """Test loading a valid job file"""
        loader = FunctionLoader(wordcount_job_file)
        module = loader.load_module()

        assert module is not None
        assert hasattr(module, 'reduce_function')

    def test_raises_error_for_nonexistent_file(self):
        """Test that loading non-existent file raises FileNotFoundError"""
        loader = FunctionLoader('/nonexistent/file.py')

        with pytest.raises(FileNotFoundError):
            loader.load_module()

    def test_get_reduce_function_loads_module_automatically(self, wordcount_job_file):
        """Test that get_reduce_function loads module if not already loaded"""
        loader = FunctionLoader(wordcount_job_file)
        # Don't call load_module manually
        reduce_func = loader.get_reduce_function()

        assert callable(reduce_func)
        assert loader.module is not None


class TestFunctionLoaderReduceFunction:
    """Tests for reduce function loading"""

    def test_wordcount_reduce_sums_counts(self, wordcount_job_file):
        reduce_func = FunctionLoader(wordcount_job_file).get_reduce_function()

        assert reduce_func('hello', ['1', '2', '3']) == '6'

    def test_inverted_index_reduce_deduplicates(self, inverted_index_job_file):
        reduce_func = FunctionLoader(inverted_index_job_file).get_reduce_function()

        assert reduce_func('fox', ['doc_2', 'doc_1', 'doc_2']) == '2 doc_1,doc_2'

    def test_raises_error_when_reduce_function_missing(self, temp_dir):
        """Test error when module doesn't define reduce_function"""
        invalid_file = os.path.join(temp_dir, 'invalid.py')
        with open(invalid_file, 'w') as f:
            f.write("def map_function(key, value):\n    return []\n")

        loader = FunctionLoader(invalid_file)

        with pytest.raises(AttributeError, match="reduce_function"):
            loader.get_reduce_function()

    def test_raises_error_when_reduce_function_not_callable(self, temp_dir):
        invalid_file = os.path.join(temp_dir, 'not_callable.py')
        with open(invalid_file, 'w') as f:
            f.write("reduce_function = 'sum'\n")

        with pytest.raises(AttributeError):
            FunctionLoader(invalid_file).get_reduce_function()
