class PersistenceError(Exception):
	"""Lỗi đọc/ghi nơi lưu trữ (session hoặc cơ sở dữ liệu)."""
	pass
