"""Shell and console helpers for basectl.

Import from the submodules: ``basectl.utils.formatting`` depends on the
loader package, which in turn runs git through ``basectl.utils.shell``.
"""
