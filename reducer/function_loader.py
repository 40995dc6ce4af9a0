"""
Dynamic loader for user job files
Loads the reduce function from a user-provided Python file
"""

import importlib.util
import sys
import os


class FunctionLoader:
    """Dynamically loads a user-provided reduce function from a Python file"""

    def __init__(self, job_file: str):
        """
        Args:
            job_file: Path to user's Python file defining reduce_function
        """
        self.job_file = job_file
        self.module = None

    def load_module(self):
        """
        Dynamically load the user job module

        Returns:
            The loaded module object

        Raises:
            FileNotFoundError: If the job file doesn't exist
            ImportError: If the file cannot be loaded as a module
        """
        if not os.path.exists(self.job_file):
            raise FileNotFoundError(f"Job file not found: {self.job_file}")

        module_name = f"user_job_{os.path.splitext(os.path.basename(self.job_file))[0]}"
        spec = importlib.util.spec_from_file_location(module_name, self.job_file)
        if spec is None or spec.loader is None:
            raise ImportError(f"Failed to load job file: {self.job_file}")
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        spec.loader.exec_module(module)
        self.module = module
        return module

    def get_reduce_function(self):
        """
        Get reduce function from the loaded module

        Returns:
            The reduce_function callable from the module

        Raises:
            AttributeError: If module doesn't define a callable 'reduce_function'
        """
        if not self.module:
            self.load_module()

        reduce_function = getattr(self.module, 'reduce_function', None)
        if not callable(reduce_function):
            raise AttributeError("Job file must define a callable 'reduce_function'")
        return reduce_function
