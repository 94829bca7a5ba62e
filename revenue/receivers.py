from .services import post_maintenance_costs, post_reservation_revenue


def post_completed_reservation(sender, reservation, previous, status, **kwargs):
    if status == 'completed':
        post_reservation_revenue(reservation)


def post_completed_maintenance(sender, cycle, **kwargs):
    post_maintenance_costs(cycle)
