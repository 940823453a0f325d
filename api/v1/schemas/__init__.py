"""Re-export individual schema modules for easy imports."""

from .user import LoginIn, LoginOut, RegisterIn, RegisterOut, RegisteredUserOut, UserOut
from .plan import PlanoEnvelope, PlanoList, PlanoOut, PlanoPage
from .dashboard import DashboardOut, ObjetivoCount, UltimoPlano

__all__ = [
    "LoginIn",
    "LoginOut",
    "RegisterIn",
    "RegisterOut",
    "RegisteredUserOut",
    "UserOut",
    "PlanoEnvelope",
    "PlanoList",
    "PlanoOut",
    "PlanoPage",
    "DashboardOut",
    "ObjetivoCount",
    "UltimoPlano",
]
