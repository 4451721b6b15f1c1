from django.db import models
from django.contrib.auth.models import AbstractUser
# Bảng tài khoản kế thừa User của Django, đồng thời là danh sách người nhập phiếu
class Account(AbstractUser):
	# id, username, password đã có sẵn trong AbstractUser
	role = models.CharField(max_length=16, choices=[('admin', 'Admin'), ('assistant', 'Assistant'), ('user', 'User')], default='user')  # Vai trò
	is_active = models.BooleanField(default=True)  # Trạng thái tài khoản
	created_at = models.DateTimeField(auto_now_add=True)  # Thời gian tạo
	updated_at = models.DateTimeField(auto_now=True)  # Thời gian cập nhật

	@property
	def display_name(self):
		return self.get_full_name() or self.username

	def __str__(self):
		return self.username

class Candidate(models.Model): # ứng cử viên, danh sách cố định
	candidate_id = models.AutoField(primary_key=True)  # Mã ứng cử viên
	name = models.CharField(max_length=255, unique=True)  # Tên ứng cử viên
	description = models.TextField(null=True, blank=True)  # Mô tả

	class Meta:
		ordering = ['candidate_id']

	def __str__(self):
		return self.name

class Entry(models.Model): # một dòng phiếu do một người nhập trong một lần nhập
	entry_id = models.AutoField(primary_key=True)  # Mã dòng
	user = models.ForeignKey(Account, on_delete=models.CASCADE, related_name='entries')  # Người nhập
	candidate_name = models.CharField(max_length=255, db_index=True)  # Tên ứng cử viên
	vote_delta = models.IntegerField(default=1)  # Số phiếu cộng thêm
	lan_nhap = models.PositiveIntegerField(db_index=True)  # Lần nhập (dùng chung cho cả một lần lưu)
	created_at = models.DateTimeField(auto_now_add=True)  # Thời gian nhập

	class Meta:
		indexes = [models.Index(fields=['user', 'lan_nhap'], name='entry_user_lan_nhap_idx')]

	def __str__(self):
		return f'{self.candidate_name} +{self.vote_delta} (lần {self.lan_nhap})'
