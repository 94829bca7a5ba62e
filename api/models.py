from django.db import models

from .ids import generate_id


class RecordModel(models.Model):
    """
    Base for every stored entity.

    Identifiers are generated here at insert time rather than by the
    database, using the subclass's ``id_prefix``.
    """
    id_prefix = 'rec'

    id = models.CharField(primary_key=True, max_length=40, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        if not self.id:
            self.id = generate_id(self.id_prefix)
            kwargs.setdefault('force_insert', True)
        super().save(*args, **kwargs)
