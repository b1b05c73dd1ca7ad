from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from boohk.database import Base, new_id
from boohk.timeutil import utc_now, isoformat


class CompanyFolder(Base):
    __tablename__ = "company_folders"

    id = Column(String(32), primary_key=True, default=new_id)
    company_id = Column(String(64), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    parent_id = Column(String(32), ForeignKey("company_folders.id"), nullable=True)
    created_by = Column(String(32), nullable=True)
    deleted = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    files = relationship("CompanyFile", back_populates="folder")

    def to_dict(self):
        return {
            "id": self.id,
            "company_id": self.company_id,
            "name": self.name,
            "parent_id": self.parent_id,
            "created_at": isoformat(self.created_at),
        }

    def __repr__(self):
        return f"<CompanyFolder {self.name}>"


class CompanyFile(Base):
    __tablename__ = "company_files"

    id = Column(String(32), primary_key=True, default=new_id)
    company_id = Column(String(64), nullable=False, index=True)
    folder_id = Column(String(32), ForeignKey("company_folders.id"), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    original_filename = Column(String(255), nullable=False)
    storage_key = Column(String(500), nullable=False)
    url = Column(String(1000), nullable=True)
    file_size = Column(Integer, nullable=True)
    mime_type = Column(String(100), nullable=True)
    uploaded_by = Column(String(32), nullable=True)
    deleted = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utc_now)
    updated_at = Column(DateTime, nullable=False, default=utc_now, onupdate=utc_now)

    folder = relationship("CompanyFolder", back_populates="files")

    @property
    def file_size_display(self):
        """Return human-readable file size."""
        if not self.file_size:
            return "Unknown"
        size = self.file_size
        for unit in ["B", "KB", "MB", "GB"]:
            if size < 1024:
                return f"{size:.1f} {unit}"
            size /= 1024
        return f"{size:.1f} TB"

    @property
    def extension(self):
        if "." in self.original_filename:
            return self.original_filename.rsplit(".", 1)[1].lower()
        return ""

    def to_dict(self):
        return {
            "id": self.id,
            "company_id": self.company_id,
            "folder_id": self.folder_id,
            "name": self.name,
            "original_filename": self.original_filename,
            "url": self.url,
            "file_size": self.file_size,
            "file_size_display": self.file_size_display,
            "mime_type": self.mime_type,
            "extension": self.extension,
            "uploaded_by": self.uploaded_by,
            "created_at": isoformat(self.created_at),
        }

    def __repr__(self):
        return f"<CompanyFile {self.name}>"
