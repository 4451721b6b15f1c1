from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import Account, Candidate, Entry


@admin.register(Account)
class AccountAdmin(UserAdmin):
	list_display = ('username', 'last_name', 'email', 'role', 'is_active')
	list_filter = ('role', 'is_active')
	fieldsets = UserAdmin.fieldsets + (('Vai trò', {'fields': ('role',)}),)


@admin.register(Candidate)
class CandidateAdmin(admin.ModelAdmin):
	list_display = ('candidate_id', 'name')
	search_fields = ('name',)


@admin.register(Entry)
class EntryAdmin(admin.ModelAdmin):
	list_display = ('entry_id', 'lan_nhap', 'user', 'candidate_name', 'vote_delta', 'created_at')
	list_filter = ('lan_nhap', 'user')
	search_fields = ('candidate_name',)
