"""
Common test configuration.
Put here only those things that can not be done through command line options and pytest.ini file.
"""

import os
import sys

# make the package importable when running the tests from a source checkout
this_source_dir = os.path.dirname(os.path.realpath(__file__))
sys.path.insert(0, os.path.dirname(this_source_dir))
