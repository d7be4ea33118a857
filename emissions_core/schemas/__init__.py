"""
Emissions core schema definitions

Any schema has a base name and optionally a ``Patch`` variant holding
the proposed changes to an existing instance of that schema. For example,
there are two classes to represent emission reports: ``Report`` and
``ReportPatch``. A patch has optional fields only. Any field of the
original model that should not be affected by some proposed change
can therefore just be omitted with a patch.

This package also contains the ``config`` module, but it's not
exported by default, since it's currently only used internally.
"""

from .bases import *
from .errors import *
from .extra import *
