"""Step definitions package for BDD tests.

Step modules are registered as plugins in the root conftest.py so pytest-bdd
can discover them.
"""
