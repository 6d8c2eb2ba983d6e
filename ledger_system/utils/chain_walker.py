# ledger_system/utils/chain_walker.py
"""
Safe sponsor chain walking utilities.
Prevents infinite loops and stops on broken links.
"""
from typing import Optional, Callable, Set, List
import logging

from models.user import User
from ledger_system.config.commission import MAX_LEVELS

logger = logging.getLogger(__name__)


class ChainWalker:
    """
    Safe utilities for walking upline/downline chains through a LedgerStore.
    Prevents infinite loops and validates chain integrity.
    """

    def __init__(self, store):
        self.store = store

    def walk_upline(
            self,
            start_user: User,
            callback: Callable[[User, int], bool],
            max_depth: int = MAX_LEVELS
    ) -> int:
        """
        Safely walk up the sponsor chain, calling callback for each user.

        Stops when referredBy is empty, when the referrer does not resolve,
        when a user would be visited twice, or after max_depth levels.

        Args:
            start_user: Starting user (never passed to callback)
            callback: Function(user, level) -> continue_walking (bool), level is 1-based
            max_depth: Maximum number of levels

        Returns:
            Number of users processed

        Example:
            def process_upline(user, level):
                print(f"Level {level}: {user.userID}")
                return True  # Continue walking

            walker.walk_upline(user, process_upline)
        """
        current_user = start_user
        level = 1
        processed = 0
        visited = {start_user.userID}

        while level <= max_depth:
            if not current_user.referredBy:
                logger.debug(f"No more upline at level {level}")
                break

            upline_user = self.store.findUserById(current_user.referredBy)

            if not upline_user:
                logger.warning(
                    f"Upline not found: userID={current_user.referredBy} "
                    f"for user {current_user.userID}"
                )
                break

            # Check for cycles
            if upline_user.userID in visited:
                logger.error(
                    f"Cycle detected at user {upline_user.userID} "
                    f"walking up from user {start_user.userID}"
                )
                break

            visited.add(upline_user.userID)

            should_continue = callback(upline_user, level)
            processed += 1

            if not should_continue:
                break

            current_user = upline_user
            level += 1

        return processed

    def walk_downline(
            self,
            start_user: User,
            callback: Callable[[User, int], None],
            max_depth: int = MAX_LEVELS,
            level: int = 1,
            visited: Optional[Set[int]] = None
    ) -> int:
        """
        Safely walk down the referral tree recursively.

        Args:
            start_user: Starting user (never passed to callback)
            callback: Function(user, level) to call for each user, level is 1-based
            max_depth: Deepest level to visit
            level: Level of start_user's direct referrals
            visited: Set of visited user IDs (for cycle detection)

        Returns:
            Total number of users processed
        """
        if visited is None:
            visited = set()

        if level > max_depth:
            return 0

        # Check for cycles
        if start_user.userID in visited:
            logger.error(f"Cycle detected in downline at user {start_user.userID}")
            return 0

        visited.add(start_user.userID)

        processed = 0

        for referral in self.store.findReferrals(start_user.userID):
            if referral.userID in visited:
                logger.error(f"Cycle detected in downline at user {referral.userID}")
                continue

            callback(referral, level)
            processed += 1

            processed += self.walk_downline(
                referral,
                callback,
                max_depth,
                level + 1,
                visited
            )

        return processed

    def get_upline_chain(self, user: User, max_depth: int = MAX_LEVELS) -> List[User]:
        """
        Get list of users in the upline chain.

        Returns:
            List of users from direct sponsor upwards
        """
        chain = []

        def collect(upline_user, level):
            chain.append(upline_user)
            return True  # Continue

        self.walk_upline(user, collect, max_depth)
        return chain
