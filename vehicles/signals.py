from django.dispatch import Signal

# Arguments: cycle.
maintenance_completed = Signal()
