import asyncio
import logging
import os
from functools import partial

from dotenv import load_dotenv

from application.contract import ContractFacade
from application.match import MatchCoordinator
from application.session import SessionManager
from domain.models import CapabilityProfile
from infrastructure.config import get_config
from infrastructure.db.auth_store_sqlite import SqliteAuthStore
from infrastructure.db.key_store_sqlite import SqliteKeyStore
from infrastructure.navigation import BrowserNavigator
from infrastructure.near.wallet import connect
from interfaces.console.handlers import ConsoleApp


load_dotenv()

NEAR_ENV = os.environ.get("NEAR_ENV", "testnet")
CONTRACT_NAME = os.environ.get("CONTRACT_NAME")
GATEWAY_PROFILE = os.environ.get("GATEWAY_PROFILE", "matched")
KEYSTORE_PATH = os.environ.get("KEYSTORE_PATH", "keystore.db")
APP_URL = os.environ.get("APP_URL", "http://localhost:1234/")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "WARNING")


async def amain() -> None:
    config = get_config(NEAR_ENV, CONTRACT_NAME)
    profile = CapabilityProfile(GATEWAY_PROFILE)

    key_store = SqliteKeyStore(KEYSTORE_PATH)
    auth_store = SqliteAuthStore(KEYSTORE_PATH)
    navigator = BrowserNavigator(APP_URL)

    session_manager = SessionManager(
        config,
        partial(connect, key_store=key_store, auth_store=auth_store, navigator=navigator),
        navigator,
    )
    # A BootError here ends the program: nothing works without a session.
    session = await session_manager.initialize()

    facade = ContractFacade(session, config.contract_name, profile)
    coordinator = MatchCoordinator(facade, session)
    app = ConsoleApp(session_manager, facade, coordinator, config, navigator)
    try:
        await app.run()
    finally:
        if session.connection is not None:
            await session.connection.aclose()


def main() -> None:
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    asyncio.run(amain())


if __name__ == "__main__":
    main()
