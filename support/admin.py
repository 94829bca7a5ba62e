from django.contrib import admin

from .models import Ticket, TicketReply


class TicketReplyInline(admin.TabularInline):
    model = TicketReply
    extra = 0
    readonly_fields = ('sender', 'created_at')


@admin.register(Ticket)
class TicketAdmin(admin.ModelAdmin):
    list_display = ('id', 'title', 'host', 'type', 'priority', 'status', 'created_at')
    list_filter = ('type', 'status', 'priority')
    search_fields = ('id', 'title', 'description', 'host__company_name')
    inlines = [TicketReplyInline]
