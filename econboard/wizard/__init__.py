"""Multi-step data-entry wizards.

StepWizard is the reusable state machine; ``forms`` defines the concrete
GDP amount, sector share, private/government and growth-by-sector wizards.
"""
