from __future__ import annotations

from typing import Dict

from .models import CapabilityProfile, ContractMethod, MethodKind


VIEW = MethodKind.VIEW
CHANGE = MethodKind.CHANGE


# Single-player puzzle: one board per account, no stakes.
SOLO_METHODS: Dict[str, ContractMethod] = {
    m.name: m
    for m in (
        ContractMethod("get_tiles", VIEW),
        ContractMethod("new_game", CHANGE, ("shuffle",)),
        ContractMethod("run", CHANGE, ("tiles",)),
    )
}

# Two-player match with an escrowed price.
MATCHED_METHODS: Dict[str, ContractMethod] = {
    m.name: m
    for m in (
        ContractMethod("get_tiles", VIEW, ("account_id",)),
        ContractMethod("get_players", VIEW),
        ContractMethod("is_i_in_players", VIEW),
        ContractMethod("get_opponent", VIEW, ("account_id",)),
        ContractMethod("is_play_player", VIEW, ("player_id",)),
        ContractMethod("new_game", CHANGE, ("shuffle",)),
        ContractMethod("run", CHANGE, ("tiles",)),
        ContractMethod("add_me_to_players", CHANGE),
        ContractMethod("set_price", CHANGE, payable=True),
        ContractMethod("withdraw_and_cancel_price", CHANGE),
        ContractMethod("set_opponent", CHANGE, ("opponent_id",)),
    )
}

PROFILES: Dict[CapabilityProfile, Dict[str, ContractMethod]] = {
    CapabilityProfile.SOLO: SOLO_METHODS,
    CapabilityProfile.MATCHED: MATCHED_METHODS,
}


def methods_for(profile: CapabilityProfile) -> Dict[str, ContractMethod]:
    return PROFILES[CapabilityProfile(profile)]
