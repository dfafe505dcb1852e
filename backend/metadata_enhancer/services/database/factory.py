"""
Database Factory for creating database adapters.
Implements Factory Pattern for plug-and-play database support.
"""
import os
from typing import Optional

from .base import DatabaseInterface
from .memory_adapter import MemoryAdapter


class DatabaseFactory:
    """
    Factory for creating database adapters.
    Only the in-memory backend ships today; new adapters register here.
    """
    
    @staticmethod
    def create(database_type: Optional[str] = None) -> DatabaseInterface:
        """
        Create a database adapter instance.
        
        Args:
            database_type: Type of database ('memory', or None for auto-detect)
        
        Returns:
            DatabaseInterface instance
        """
        if database_type is None:
            database_type = os.getenv("DATABASE_TYPE", "memory")
        
        database_type = database_type.lower()
        
        if database_type == "memory":
            return MemoryAdapter()
        raise ValueError(
            f"Unsupported database type: {database_type}. "
            f"Supported types: 'memory'"
        )
    
    @staticmethod
    async def create_and_initialize(database_type: Optional[str] = None) -> DatabaseInterface:
        """Create a database adapter and initialize it."""
        db = DatabaseFactory.create(database_type)
        await db.initialize()
        return db
