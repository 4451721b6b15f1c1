from django.apps import AppConfig


class QuanLyPhieuBauConfig(AppConfig):
	default_auto_field = 'django.db.models.BigAutoField'
	name = 'quan_ly_phieu_bau'
	verbose_name = 'Quản lý phiếu bầu'
