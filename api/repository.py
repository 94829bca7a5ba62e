import logging

from django.db import DatabaseError, IntegrityError

from .exceptions import StorageError

logger = logging.getLogger(__name__)


class Repository:
    """
    Persistence contract shared by every entity collection.

    ``list`` degrades to an empty result when the store cannot be read;
    every other operation surfaces ``StorageError`` so callers may retry.
    """

    def __init__(self, model):
        self.model = model

    @property
    def name(self):
        return self.model._meta.verbose_name_plural

    def queryset(self):
        return self.model._default_manager.all()

    def list(self, **filters):
        try:
            return list(self.queryset().filter(**filters))
        except DatabaseError:
            logger.exception('Could not read %s, serving an empty collection', self.name)
            return []

    def get_by_id(self, pk):
        try:
            return self.queryset().filter(pk=pk).first()
        except DatabaseError as exc:
            raise StorageError(f'Could not read {self.name}.') from exc

    def insert(self, **fields):
        try:
            return self.model._default_manager.create(**fields)
        except IntegrityError:
            raise
        except DatabaseError as exc:
            raise StorageError(f'Could not write {self.name}.') from exc

    def update(self, pk, **fields):
        instance = self.get_by_id(pk)
        if instance is None:
            return None
        return self.save(instance, **fields)

    def save(self, instance, **fields):
        for name, value in fields.items():
            setattr(instance, name, value)
        update_fields = list(fields) + ['updated_at'] if fields else None
        try:
            instance.save(update_fields=update_fields)
        except DatabaseError as exc:
            raise StorageError(f'Could not write {self.name}.') from exc
        return instance

    def delete(self, pk):
        try:
            deleted, _ = self.queryset().filter(pk=pk).delete()
        except DatabaseError as exc:
            raise StorageError(f'Could not delete from {self.name}.') from exc
        return deleted > 0
