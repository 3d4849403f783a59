"""Application UnitOfWork – handle, performer port and transactional decorator."""
from mp_outbox.application.uow.unit_of_work import UnitOfWork, UnitOfWorkPerformer, Work
from mp_outbox.application.uow.decorators import transactional

__all__ = ["UnitOfWork", "UnitOfWorkPerformer", "Work", "transactional"]
