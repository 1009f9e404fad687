"""
Condition-Based Task Generation Engine

Decides, for one user, which entries of a shared task catalog apply, based
on that user's assessment answers.

    answers + catalog  ->  generated task set

ARCHITECTURAL GUARANTEE:
------------------------
The evaluation core (answers, conditions, evaluator, orchestrator.generate)
is pure. It knows nothing about:
    - how answers are collected
    - where the catalog is stored
    - how generated tasks are rendered or scheduled

All I/O happens behind the repository and task store protocols.
"""

__version__ = "0.1.0"
