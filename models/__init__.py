from .user import User, UserRole
from .project import Project, ProjectStatus
from .donation import Donation, PaymentMethod, PaymentStatus
from .payment import Payment
from .withdrawal import Withdrawal, WithdrawalMethod, WithdrawalStatus
from .identifier_remap_archive import IdentifierRemapArchive
