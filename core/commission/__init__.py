"""Commission roster and activation roles."""
from core.commission.roles import required_activation_role, authorize_activation
from core.commission.roster import CommissionRoster

__all__ = ['CommissionRoster', 'required_activation_role', 'authorize_activation']
