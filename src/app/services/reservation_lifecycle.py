from app.core.exceptions import StateError
from app.utils.enums import ReservationState

ALLOWED_TRANSITIONS = {
    ReservationState.PENDING: frozenset(ReservationState),
    ReservationState.CONFIRMED: frozenset({
        ReservationState.CONFIRMED,
        ReservationState.COMPLETED,
        ReservationState.CANCELLED,
    }),
    ReservationState.COMPLETED: frozenset({ReservationState.COMPLETED}),
    ReservationState.CANCELLED: frozenset({ReservationState.CANCELLED}),
}
TERMINAL_STATES = frozenset({
    ReservationState.COMPLETED,
    ReservationState.CANCELLED,
})
STATE_ERRORS = {
    ReservationState.PENDING: 'Нельзя вернуть резерв в ожидание',
    ReservationState.CONFIRMED: 'Нельзя подтвердить {current} резерв',
    ReservationState.COMPLETED: 'Нельзя завершить {current} резерв',
    ReservationState.CANCELLED: 'Нельзя отменить {current} резерв',
}
STATE_TITLES = {
    ReservationState.PENDING: 'ожидающий',
    ReservationState.CONFIRMED: 'подтверждённый',
    ReservationState.COMPLETED: 'завершённый',
    ReservationState.CANCELLED: 'отменённый',
}


def can_transition(
    current: ReservationState,
    target: ReservationState,
) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def apply_transition(
    current: ReservationState,
    target: ReservationState,
) -> ReservationState:
    """Возвращает новый статус резерва или выбрасывает StateError.

    Завершённый и отменённый резервы терминальны: повторная отмена или
    повторное завершение ничего не меняют, любой другой переход запрещён.
    """
    if not can_transition(current, target):
        raise StateError(
            STATE_ERRORS[target].format(current=STATE_TITLES[current]),
        )
    return target
