"""
SQLAlchemy entities for the "world" sample dataset.

The tables are read-only for this package. Relationships use
``lazy="raise"`` so every query has to state which related rows it loads;
see ``WorldRepository`` for the fetch scopes in use.
"""

from sqlalchemy import (
    Boolean,
    Column,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    SmallInteger,
    String,
)
from sqlalchemy.orm import relationship

from .db import Base
from .models import Continent


class Country(Base):
    __tablename__ = "country"

    code = Column(String(3), primary_key=True)
    code_2 = Column(String(2), nullable=False)
    name = Column(String(52), nullable=False)
    continent = Column(
        Enum(
            Continent,
            name="continent",
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=False,
        default=Continent.ASIA,
    )
    region = Column(String(26), nullable=False)
    surface_area = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    indep_year = Column(SmallInteger, nullable=True)
    population = Column(Integer, nullable=False, default=0)
    life_expectancy = Column(Numeric(3, 1, asdecimal=False), nullable=True)
    gnp = Column(Numeric(10, 2, asdecimal=False), nullable=True)
    gnp_old = Column("gnpo_id", Numeric(10, 2, asdecimal=False), nullable=True)
    local_name = Column(String(45), nullable=False, default="")
    government_form = Column(String(45), nullable=False, default="")
    head_of_state = Column(String(60), nullable=True)
    # Plain id; the capital city is never loaded through the ORM.
    capital = Column(Integer, nullable=True)

    languages = relationship(
        "CountryLanguage",
        back_populates="country",
        collection_class=set,
        lazy="raise",
    )

    def __repr__(self):
        return f"<Country(code='{self.code}', name='{self.name}')>"


class CountryLanguage(Base):
    __tablename__ = "country_language"

    country_code = Column(
        String(3),
        ForeignKey("country.code"),
        primary_key=True,
    )
    language = Column(String(30), primary_key=True)
    is_official = Column(Boolean, nullable=False, default=False)
    percentage = Column(Numeric(4, 1, asdecimal=False), nullable=False, default=0.0)

    country = relationship("Country", back_populates="languages", lazy="raise")

    def __repr__(self):
        return (
            f"<CountryLanguage(country_code='{self.country_code}', "
            f"language='{self.language}')>"
        )


class City(Base):
    __tablename__ = "city"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(35), nullable=False)
    country_code = Column(
        String(3),
        ForeignKey("country.code"),
        nullable=False,
        index=True,
    )
    district = Column(String(20), nullable=False)
    population = Column(Integer, nullable=False, default=0)

    country = relationship("Country", lazy="raise")

    def __repr__(self):
        return f"<City(id={self.id}, name='{self.name}')>"
