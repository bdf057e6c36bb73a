from sqlalchemy import Column, Integer, String, Text, ForeignKey, Boolean
from sqlalchemy.orm import relationship, declarative_base

Base = declarative_base()


class Provider(Base):
    __tablename__ = 'providers'
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    api_key = Column(Text)
    base_url = Column(Text)
    is_active = Column(Boolean, nullable=False, default=True)


class Model(Base):
    __tablename__ = 'models'
    id = Column(Integer, primary_key=True, autoincrement=True)
    provider_id = Column(Integer, ForeignKey('providers.id', ondelete="CASCADE"), nullable=False)
    name = Column(String, nullable=False)
    model_id = Column(String, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    provider = relationship("Provider")
