"""
ATG Tax Planning Intake

Branded client intake questionnaire for ATG – Advanced Tax Group.

Layers:
- catalog: questionnaire content (sections, questions, result writeups)
- conditions: rule evaluation that selects strategy writeups from answers
- flow: question visibility, answer input handling, wizard navigation
- contacts: contact capture and CRM sync
- export: results markup rendering and PDF export

Version: intake_v1
"""

__version__ = "1.0.0"
